"""
==============================================================================
Configuration Package
==============================================================================

Centralized configuration management.

This package provides:
- Environment-based process settings (Pydantic Settings)
- ConfigurationProvider protocol consumed by the delivery pipeline
- StaticConfigurationProvider for fixed configuration

Usage:
------
    from scanrelay.config import get_settings, StaticConfigurationProvider

    settings = get_settings()
    print(settings.endpoint_url)

==============================================================================
"""

from .settings import SCAN_TYPES, Settings, get_settings
from .provider import ConfigurationProvider, StaticConfigurationProvider

__all__ = [
    "SCAN_TYPES",
    "Settings",
    "get_settings",
    "ConfigurationProvider",
    "StaticConfigurationProvider",
]
