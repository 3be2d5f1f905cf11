"""
==============================================================================
Device Settings Endpoints
==============================================================================

Read and change the delivery endpoint and device identity.

==============================================================================
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from scanrelay.db.database import get_db
from scanrelay.schemas.device_settings import DeviceSettingsUpdate, DeviceSettingsResponse
from scanrelay.services.settings_service import DeviceSettingsService


router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=DeviceSettingsResponse)
async def get_device_settings(db: Session = Depends(get_db)):
    """Get the current device configuration."""
    service = DeviceSettingsService(db)
    return DeviceSettingsResponse(settings=service.get_detail())


@router.put("", response_model=DeviceSettingsResponse)
async def update_device_settings(
    data: DeviceSettingsUpdate,
    db: Session = Depends(get_db)
):
    """
    Update the device configuration.

    The new endpoint applies to the next delivery attempt. An empty
    endpoint_url disables delivery; scans then fail without a request.
    """
    service = DeviceSettingsService(db)
    return DeviceSettingsResponse(settings=service.update(data))
