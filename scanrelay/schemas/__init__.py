"""
==============================================================================
Schemas Package - Pydantic Models
==============================================================================

Request and response schemas using Pydantic for validation.

This package provides:
- Scan: Scan submission and history schemas
- DeviceSettings: Device configuration schemas

==============================================================================
"""

from .scan import (
    ScanSubmit,
    ScanEventDetail,
    ScanSubmitResponse,
    ScanResponse,
    ScanListResponse,
    ScanClearResponse,
)
from .device_settings import (
    DeviceSettingsUpdate,
    DeviceSettingsDetail,
    DeviceSettingsResponse,
)

__all__ = [
    # Scan
    "ScanSubmit",
    "ScanEventDetail",
    "ScanSubmitResponse",
    "ScanResponse",
    "ScanListResponse",
    "ScanClearResponse",
    # Device settings
    "DeviceSettingsUpdate",
    "DeviceSettingsDetail",
    "DeviceSettingsResponse",
]
