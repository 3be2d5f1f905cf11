"""
==============================================================================
Configuration Provider Module
==============================================================================

Read-only view of the device configuration consumed by the delivery
pipeline.

The dispatcher never looks settings up on its own; it receives a provider
at construction time. Production wiring uses the database-backed provider
in the services package, tests use StaticConfigurationProvider.

==============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class ConfigurationProvider(Protocol):
    """Supplies the delivery destination and device metadata."""

    def get_endpoint_url(self) -> str:
        """Return the endpoint URL, or an empty string when not configured."""
        ...

    def get_device_info(self) -> str:
        """Return the free-text device description."""
        ...


@dataclass
class StaticConfigurationProvider:
    """
    Configuration provider with fixed values.

    Example:
        >>> config = StaticConfigurationProvider("http://collector.local/scan")
        >>> config.get_endpoint_url()
        'http://collector.local/scan'
    """

    endpoint_url: str = ""
    device_info: str = "Python Scanner"

    def get_endpoint_url(self) -> str:
        return self.endpoint_url

    def get_device_info(self) -> str:
        return self.device_info
