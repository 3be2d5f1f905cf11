"""
==============================================================================
SQLAlchemy ORM Models Module
==============================================================================

ORM models for persisted device configuration.

Database Schema:
---------------

    ┌─────────────────────────────────────────────────────────────────┐
    │                        device_settings                          │
    ├─────────────────────────────────────────────────────────────────┤
    │ key (VARCHAR, PK)           endpoint_url | device_info | ...    │
    │ value (VARCHAR, NOT NULL)                                       │
    │ updated_at (DATETIME, AUTO UPDATE)                              │
    └─────────────────────────────────────────────────────────────────┘

A key/value table mirrors how a device keeps its preferences; the set of
keys is fixed by SettingKey.

=============================================================================
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String

from scanrelay.db.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SettingKey(str, enum.Enum):
    """Keys stored in device_settings."""

    ENDPOINT_URL = "endpoint_url"
    DEVICE_INFO = "device_info"
    DEFAULT_SCAN_TYPE = "default_scan_type"

    def __str__(self) -> str:
        return self.value


class DeviceSetting(Base):
    """
    One persisted device preference.

    Attributes:
        key: Setting name (SettingKey value)
        value: Stored value, empty string allowed
        updated_at: Last modification time
    """

    __tablename__ = "device_settings"

    key = Column(String(64), primary_key=True)
    value = Column(String(2048), nullable=False, default="")
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    def __repr__(self) -> str:
        return f"DeviceSetting(key={self.key!r}, value={self.value!r})"
