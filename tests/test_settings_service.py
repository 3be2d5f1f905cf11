"""
==============================================================================
Device Settings Service Tests
==============================================================================

Tests for persisted device configuration and the database-backed
configuration provider.

==============================================================================
"""

from contextlib import contextmanager

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from scanrelay.config import ConfigurationProvider, Settings
from scanrelay.core.exceptions import AppException
from scanrelay.db import DatabaseInitializer, DeviceSetting, SettingKey
from scanrelay.schemas import DeviceSettingsUpdate
from scanrelay.scanner.models import ScanType
from scanrelay.services import DatabaseConfigurationProvider, DeviceSettingsService

from conftest import TestingSessionLocal


@pytest.fixture
def settings() -> Settings:
    return Settings(
        endpoint_url="http://192.168.50.128:5000",
        device_info="Python Scanner",
        default_scan_type="normal",
    )


class InMemoryDatabaseManager:
    """Session source bound to the in-memory test engine."""

    @contextmanager
    def session_scope(self):
        session = TestingSessionLocal()
        try:
            yield session
            session.commit()
        finally:
            session.close()


class BrokenDatabaseManager:
    @contextmanager
    def session_scope(self):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))
        yield


class TestDeviceSettingsService:
    """Tests for DeviceSettingsService."""

    def test_defaults_when_nothing_stored(self, db: Session, settings: Settings):
        service = DeviceSettingsService(db, settings)

        detail = service.get_detail()
        assert detail.endpoint_url == "http://192.168.50.128:5000"
        assert detail.device_info == "Python Scanner"
        assert detail.default_scan_type == "normal"
        assert detail.endpoint_configured is True

    def test_update_persists(self, db: Session, settings: Settings):
        service = DeviceSettingsService(db, settings)

        service.update(DeviceSettingsUpdate(
            endpoint_url="http://10.0.0.5:5000",
            default_scan_type=ScanType.EMERGENCY,
        ))

        row = db.get(DeviceSetting, SettingKey.ENDPOINT_URL.value)
        assert row.value == "http://10.0.0.5:5000"
        assert service.get_value(SettingKey.DEFAULT_SCAN_TYPE) == "emergency"
        # Untouched key still falls back
        assert service.get_value(SettingKey.DEVICE_INFO) == "Python Scanner"

    def test_invalid_url_not_saved(self, db: Session, settings: Settings):
        service = DeviceSettingsService(db, settings)

        with pytest.raises(AppException) as exc_info:
            service.update(DeviceSettingsUpdate(endpoint_url="ftp://10.0.0.5"))

        assert exc_info.value.status_code == 422
        assert exc_info.value.code == "INVALID_ENDPOINT_URL"
        assert db.get(DeviceSetting, SettingKey.ENDPOINT_URL.value) is None

    def test_empty_url_clears_endpoint(self, db: Session, settings: Settings):
        service = DeviceSettingsService(db, settings)

        detail = service.update(DeviceSettingsUpdate(endpoint_url="  "))

        assert detail.endpoint_url == ""
        assert detail.endpoint_configured is False


class TestDatabaseConfigurationProvider:
    """Tests for DatabaseConfigurationProvider."""

    def test_is_configuration_provider(self, settings: Settings):
        provider = DatabaseConfigurationProvider(InMemoryDatabaseManager(), settings)
        assert isinstance(provider, ConfigurationProvider)

    def test_reads_latest_values(self, db: Session, settings: Settings):
        provider = DatabaseConfigurationProvider(InMemoryDatabaseManager(), settings)
        assert provider.get_device_info() == "Python Scanner"

        DeviceSettingsService(db, settings).update(
            DeviceSettingsUpdate(device_info="Dock 3", endpoint_url="")
        )

        assert provider.get_device_info() == "Dock 3"
        assert provider.get_endpoint_url() == ""
        assert provider.get_default_scan_type() == "normal"

    def test_falls_back_when_database_fails(self, settings: Settings):
        provider = DatabaseConfigurationProvider(BrokenDatabaseManager(), settings)

        assert provider.get_endpoint_url() == "http://192.168.50.128:5000"
        assert provider.get_device_info() == "Python Scanner"


class TestDatabaseInitializer:
    """Tests for default settings seeding."""

    def test_seed_inserts_missing_only(self, db: Session):
        db.add(DeviceSetting(key=SettingKey.DEVICE_INFO.value, value="Dock 3"))
        db.commit()

        initializer = DatabaseInitializer(session=db)
        inserted = initializer.seed_default_settings()

        assert SettingKey.DEVICE_INFO.value not in inserted
        assert SettingKey.ENDPOINT_URL.value in inserted
        assert db.get(DeviceSetting, SettingKey.DEVICE_INFO.value).value == "Dock 3"

    def test_seed_is_idempotent(self, db: Session):
        initializer = DatabaseInitializer(session=db)

        initializer.seed_default_settings()
        assert initializer.seed_default_settings() == []
