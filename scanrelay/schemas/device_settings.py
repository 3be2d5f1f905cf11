"""
==============================================================================
Device Settings Schemas Module
==============================================================================

Request and response schemas for the device configuration endpoints.

==============================================================================
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from scanrelay.scanner.models import ScanType


class DeviceSettingsUpdate(BaseModel):
    """
    Partial update of the device configuration.

    An empty endpoint_url is allowed and means "not configured".
    """
    endpoint_url: Optional[str] = Field(default=None, max_length=2048)
    device_info: Optional[str] = Field(default=None, max_length=255)
    default_scan_type: Optional[ScanType] = Field(default=None)

    @field_validator("endpoint_url", "device_info")
    @classmethod
    def strip_whitespace(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else None


class DeviceSettingsDetail(BaseModel):
    """Current device configuration."""
    endpoint_url: str
    device_info: str
    default_scan_type: str
    endpoint_configured: bool


class DeviceSettingsResponse(BaseModel):
    """Device configuration response."""
    success: bool = Field(default=True)
    settings: DeviceSettingsDetail
