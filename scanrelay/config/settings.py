"""
==============================================================================
Application Settings Module
==============================================================================

Configuration management using Pydantic Settings.

A single cached Settings instance is shared by the whole process.

Features:
---------
- Environment variable loading with type validation
- .env file support for local development
- Delivery and deduplication tuning knobs
- Defaults for the device configuration stored in the database

Configuration Priority (highest to lowest):
------------------------------------------
1. Environment variables
2. .env file
3. Default values

Device Configuration:
--------------------
ENDPOINT_URL, DEVICE_INFO and DEFAULT_SCAN_TYPE only seed the device
configuration. Once an operator saves values through the settings API,
the persisted values take precedence.

==============================================================================
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Module logger
logger = logging.getLogger(__name__)


# Scan categories the UI can trigger
SCAN_TYPES = ("normal", "emergency")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Display name for the application
        app_env: Environment mode (development/staging/production)
        debug: Enable debug mode for verbose logging
        host: Server bind address
        port: Server port number
        database_url: SQLAlchemy database connection string
        endpoint_url: Default destination for scan deliveries
        device_info: Default free-text device description sent with scans
        default_scan_type: Scan category used when a client sends none
        dedup_cooldown_seconds: Window in which identical decodes are dropped
        delivery_timeout_seconds: Upper bound for one delivery attempt
        camera_index: Camera device index for the live camera source
        cors_origins: Allowed CORS origins (JSON array string)

    Example:
        >>> settings = Settings()
        >>> settings.dedup_cooldown_seconds
        2.0
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================
    app_name: str = Field(
        default="Scan Relay",
        description="Display name for the application"
    )

    app_env: str = Field(
        default="development",
        description="Environment mode: development, staging, production"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode for verbose logging"
    )

    # =========================================================================
    # SERVER SETTINGS
    # =========================================================================
    host: str = Field(
        default="0.0.0.0",
        description="Server bind address"
    )

    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Server port number"
    )

    # =========================================================================
    # DATABASE SETTINGS
    # =========================================================================
    database_url: str = Field(
        default="sqlite:///./storage/db/scanrelay.db",
        description="SQLAlchemy database connection string"
    )

    # =========================================================================
    # DEVICE CONFIGURATION DEFAULTS
    # =========================================================================
    endpoint_url: str = Field(
        default="http://192.168.50.128:5000",
        description="Default destination URL for scan deliveries"
    )

    device_info: str = Field(
        default="Python Scanner",
        max_length=255,
        description="Free-text device description sent with every scan"
    )

    default_scan_type: str = Field(
        default="normal",
        description="Scan category used when the client does not send one"
    )

    # =========================================================================
    # PIPELINE SETTINGS
    # =========================================================================
    dedup_cooldown_seconds: float = Field(
        default=2.0,
        ge=0.0,
        le=60.0,
        description="Identical decodes inside this window are suppressed"
    )

    delivery_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        le=300.0,
        description="Upper bound for a single delivery attempt"
    )

    camera_index: int = Field(
        default=0,
        ge=0,
        description="Camera device index for live scanning"
    )

    # =========================================================================
    # CORS SETTINGS
    # =========================================================================
    cors_origins: str = Field(
        default='["*"]',
        description="Allowed CORS origins as JSON array string"
    )

    # =========================================================================
    # VALIDATORS
    # =========================================================================
    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, value: str) -> str:
        """
        Validate and normalize application environment.

        Unknown values fall back to 'development' with a warning.
        """
        valid_envs = {"development", "staging", "production"}
        normalized = value.lower().strip()

        if normalized not in valid_envs:
            logger.warning(
                f"Unknown environment '{value}', defaulting to 'development'"
            )
            return "development"

        return normalized

    @field_validator("default_scan_type")
    @classmethod
    def validate_default_scan_type(cls, value: str) -> str:
        """
        Validate the default scan category.

        Raises:
            ValueError: If the category is not one of SCAN_TYPES
        """
        normalized = value.lower().strip()

        if normalized not in SCAN_TYPES:
            raise ValueError(
                f"Unsupported scan type: {value}. "
                f"Supported: {', '.join(SCAN_TYPES)}"
            )

        return normalized

    @field_validator("endpoint_url", "device_info")
    @classmethod
    def strip_whitespace(cls, value: str) -> str:
        return value.strip()

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================
    @property
    def cors_origins_list(self) -> List[str]:
        """
        Parse CORS origins from JSON string to list.

        Returns:
            List of allowed origin strings
        """
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
            return ["*"]
        except json.JSONDecodeError:
            logger.warning(
                f"Invalid CORS origins JSON: {self.cors_origins}, "
                "defaulting to ['*']"
            )
            return ["*"]

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================
    def get_database_path(self) -> Optional[Path]:
        """
        Extract database file path for SQLite databases.

        Returns:
            Path to database file, or None for non-file databases
        """
        if self.database_url.startswith("sqlite:///"):
            db_path = self.database_url.replace("sqlite:///", "")
            if db_path.startswith("./"):
                db_path = db_path[2:]
            return Path(db_path)
        return None

    def ensure_directories(self) -> None:
        """Create the database directory for file-backed SQLite."""
        db_path = self.get_database_path()
        if db_path:
            db_path.parent.mkdir(parents=True, exist_ok=True)

        logger.debug("Required directories created/verified")

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Settings(app_name={self.app_name!r}, "
            f"app_env={self.app_env!r}, "
            f"endpoint_url={self.endpoint_url!r}, "
            f"debug={self.debug})"
        )


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the global Settings instance.

    Returns:
        Cached Settings instance
    """
    settings = Settings()
    settings.ensure_directories()

    if settings.debug:
        logger.info(f"Configuration loaded: {settings}")

    return settings
