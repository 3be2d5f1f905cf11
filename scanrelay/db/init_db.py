"""
==============================================================================
Database Initialization Module
==============================================================================

Database setup at application startup.

Initialization Flow:
-------------------
1. Create all tables from ORM models
2. Seed device settings that have never been saved, using Settings
   defaults (ENDPOINT_URL, DEVICE_INFO, DEFAULT_SCAN_TYPE)
3. Verify the connection

Existing rows are never overwritten, so values saved through the settings
API survive restarts.

Usage:
------
    from scanrelay.db import init_db
    init_db()

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from scanrelay.config import get_settings
from scanrelay.db.database import DatabaseManager
from scanrelay.db.models import DeviceSetting, SettingKey


# Module logger
logger = logging.getLogger(__name__)


class DatabaseInitializer:
    """
    Database initialization manager.

    Example:
        >>> initializer = DatabaseInitializer()
        >>> initializer.initialize()
    """

    def __init__(
        self,
        db_manager: Optional[DatabaseManager] = None,
        session: Optional[Session] = None
    ) -> None:
        """
        Initialize the database initializer.

        Args:
            db_manager: Optional DatabaseManager instance
            session: Optional existing session (creates new if None)
        """
        self._db_manager = db_manager or DatabaseManager()
        self._settings = get_settings()
        self._session = session

    def _get_session(self) -> Session:
        if self._session is not None:
            return self._session
        return self._db_manager.get_session()

    def default_values(self) -> Dict[SettingKey, str]:
        """Seed values taken from process settings."""
        return {
            SettingKey.ENDPOINT_URL: self._settings.endpoint_url,
            SettingKey.DEVICE_INFO: self._settings.device_info,
            SettingKey.DEFAULT_SCAN_TYPE: self._settings.default_scan_type,
        }

    def create_tables(self) -> None:
        """Create all database tables from ORM models."""
        logger.info("Creating database tables...")
        self._db_manager.create_tables()

    def seed_default_settings(self) -> List[str]:
        """
        Insert missing device settings.

        Returns:
            Keys that were inserted
        """
        session = self._get_session()
        inserted = []

        try:
            for key, value in self.default_values().items():
                if session.get(DeviceSetting, key.value) is None:
                    session.add(DeviceSetting(key=key.value, value=value))
                    inserted.append(key.value)

            session.commit()

            if inserted:
                logger.info(f"✅ Seeded device settings: {', '.join(inserted)}")

            return inserted

        except Exception as e:
            session.rollback()
            logger.error(f"Failed to seed device settings: {e}")
            raise
        finally:
            if self._session is None:
                session.close()

    def initialize(self) -> None:
        """Create tables, seed defaults and verify the connection."""
        logger.info("Initializing database...")

        self.create_tables()
        self.seed_default_settings()

        if self._db_manager.verify_connection():
            logger.info("✅ Database connection verified")
        else:
            logger.warning("⚠️ Database connection check failed")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def init_db() -> None:
    """Initialize the database at application startup."""
    initializer = DatabaseInitializer()
    initializer.initialize()
