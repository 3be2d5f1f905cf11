"""
==============================================================================
Services Package - Business Logic Layer
==============================================================================

Service classes sitting between the API layer and the scanner pipeline.

This package provides:
- ScanService: Dedup, history and delivery orchestration
- DeviceSettingsService: Persisted device configuration
- DatabaseConfigurationProvider: Delivery configuration read per attempt

Architecture Pattern: Service Layer
----------------------------------

    ┌─────────────────┐
    │   API Router    │
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │    Service      │  ← Business Logic
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │ Scanner / ORM   │  ← Pipeline and persisted settings
    └─────────────────┘

Usage:
------
    from scanrelay.services import get_scan_service

    service = get_scan_service()
    event = await service.submit("8801234567890")

==============================================================================
"""

from .scan_service import (
    ScanService,
    init_scan_service,
    get_scan_service,
    reset_scan_service,
)
from .settings_service import DeviceSettingsService, DatabaseConfigurationProvider

__all__ = [
    "ScanService",
    "init_scan_service",
    "get_scan_service",
    "reset_scan_service",
    "DeviceSettingsService",
    "DatabaseConfigurationProvider",
]
