"""
==============================================================================
Device Settings Service Module
==============================================================================

Reads and updates the persisted device configuration.

This module implements:
- DeviceSettingsService: CRUD over the device_settings table
- DatabaseConfigurationProvider: ConfigurationProvider backed by the
  database, read by the dispatcher on every delivery attempt

Fallbacks:
---------
A key that has never been stored falls back to the process Settings
default. If the database cannot be read, the provider logs the error and
returns the defaults, so a storage problem shows up as a normal delivery
outcome instead of an exception inside the pipeline.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scanrelay.config import Settings, get_settings
from scanrelay.core import exceptions
from scanrelay.db.database import DatabaseManager
from scanrelay.db.models import DeviceSetting, SettingKey
from scanrelay.schemas.device_settings import DeviceSettingsDetail, DeviceSettingsUpdate
from scanrelay.utils.validators import EndpointURLValidator


# Module logger
logger = logging.getLogger(__name__)


class DeviceSettingsService:
    """
    Service for the persisted device configuration.

    Attributes:
        _db: Database session
        _settings: Process settings providing defaults

    Example:
        >>> service = DeviceSettingsService(db_session)
        >>> service.update(DeviceSettingsUpdate(endpoint_url="http://10.0.0.5:5000"))
        >>> service.get_value(SettingKey.ENDPOINT_URL)
        'http://10.0.0.5:5000'
    """

    def __init__(self, db: Session, settings: Optional[Settings] = None) -> None:
        """
        Initialize settings service.

        Args:
            db: SQLAlchemy database session
            settings: Process settings (uses global settings if None)
        """
        self._db = db
        self._settings = settings or get_settings()
        self._url_validator = EndpointURLValidator()

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    def _default_for(self, key: SettingKey) -> str:
        defaults = {
            SettingKey.ENDPOINT_URL: self._settings.endpoint_url,
            SettingKey.DEVICE_INFO: self._settings.device_info,
            SettingKey.DEFAULT_SCAN_TYPE: self._settings.default_scan_type,
        }
        return defaults[key]

    def get_value(self, key: SettingKey) -> str:
        """
        Get one setting, falling back to the process default.

        Args:
            key: Setting key

        Returns:
            Stored value or default
        """
        row = self._db.get(DeviceSetting, key.value)
        if row is None:
            return self._default_for(key)
        return row.value

    def get_all(self) -> Dict[SettingKey, str]:
        """Get every setting keyed by SettingKey."""
        return {key: self.get_value(key) for key in SettingKey}

    def get_detail(self) -> DeviceSettingsDetail:
        """Get the current configuration as a response schema."""
        values = self.get_all()
        endpoint_url = values[SettingKey.ENDPOINT_URL]

        return DeviceSettingsDetail(
            endpoint_url=endpoint_url,
            device_info=values[SettingKey.DEVICE_INFO],
            default_scan_type=values[SettingKey.DEFAULT_SCAN_TYPE],
            endpoint_configured=self._url_validator.is_valid(endpoint_url),
        )

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    def _set_value(self, key: SettingKey, value: str) -> None:
        row = self._db.get(DeviceSetting, key.value)
        if row is None:
            self._db.add(DeviceSetting(key=key.value, value=value))
        else:
            row.value = value

    def update(self, data: DeviceSettingsUpdate) -> DeviceSettingsDetail:
        """
        Apply a partial configuration update.

        Args:
            data: Fields to change; None leaves a field untouched

        Returns:
            Configuration after the update

        Raises:
            AppException: If the endpoint URL is not empty and not valid
        """
        if data.endpoint_url:
            is_valid, error = self._url_validator.validate(data.endpoint_url)
            if not is_valid:
                raise exceptions.invalid_endpoint_url(data.endpoint_url, error)

        changes = {
            SettingKey.ENDPOINT_URL: data.endpoint_url,
            SettingKey.DEVICE_INFO: data.device_info,
            SettingKey.DEFAULT_SCAN_TYPE: (
                data.default_scan_type.value if data.default_scan_type else None
            ),
        }

        changed = []
        for key, value in changes.items():
            if value is not None:
                self._set_value(key, value)
                changed.append(key.value)

        self._db.commit()

        if changed:
            logger.info(f"⚙️ Device settings updated: {', '.join(changed)}")

        return self.get_detail()


class DatabaseConfigurationProvider:
    """
    ConfigurationProvider reading the device_settings table.

    Each call opens a short session, so updates made through the API are
    visible to the next delivery.
    """

    def __init__(
        self,
        db_manager: Optional[DatabaseManager] = None,
        settings: Optional[Settings] = None
    ) -> None:
        self._db_manager = db_manager or DatabaseManager()
        self._settings = settings or get_settings()

    def _read(self, key: SettingKey, default: str) -> str:
        try:
            with self._db_manager.session_scope() as session:
                return DeviceSettingsService(session, self._settings).get_value(key)
        except SQLAlchemyError as e:
            logger.error(f"Could not read setting '{key}': {e}")
            return default

    def get_endpoint_url(self) -> str:
        return self._read(SettingKey.ENDPOINT_URL, self._settings.endpoint_url)

    def get_device_info(self) -> str:
        return self._read(SettingKey.DEVICE_INFO, self._settings.device_info)

    def get_default_scan_type(self) -> str:
        return self._read(SettingKey.DEFAULT_SCAN_TYPE, self._settings.default_scan_type)
