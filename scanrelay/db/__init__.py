"""
==============================================================================
Database Package
==============================================================================

SQLAlchemy infrastructure for persisted device configuration.

Architecture:
------------
├── database.py   - DatabaseManager class, session factory
├── models.py     - DeviceSetting model, SettingKey enum
└── init_db.py    - DatabaseInitializer for setup

==============================================================================
"""

from .database import Base, DatabaseManager, get_database_manager, get_db
from .models import DeviceSetting, SettingKey
from .init_db import DatabaseInitializer, init_db

__all__ = [
    # Database management
    "Base",
    "DatabaseManager",
    "get_database_manager",
    "get_db",
    # Models
    "DeviceSetting",
    "SettingKey",
    # Initialization
    "DatabaseInitializer",
    "init_db",
]
