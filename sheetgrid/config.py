"""
Configuration module for the SheetGrid service.

Loads environment variables and validates required settings.
"""
import os
from typing import Dict, List
from dotenv import load_dotenv

from sheetgrid.utils.constants import (
    DEFAULT_COL_COUNT,
    DEFAULT_MAX_COL_COUNT,
    DEFAULT_MAX_IMPORT_BYTES,
    DEFAULT_MAX_WINDOW_CELLS,
    DEFAULT_MAX_WINDOW_ROWS,
    DEFAULT_ROW_COUNT,
)

# Load .env file
load_dotenv()

# Integer settings whose environment value could not be parsed: name -> raw value
_unparsed_env: Dict[str, str] = {}


def _int_env(name: str, default: int) -> int:
    """
    Read an integer environment variable, falling back to default when unset.

    A value that is not an integer also falls back to default and is
    recorded so Settings.validate() can report it.
    """
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        _unparsed_env[name] = raw
        return default


class Settings:
    """Application settings loaded from environment variables."""

    # Application Settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Sheet defaults (a new sheet allocates nothing, so large is fine)
    DEFAULT_ROW_COUNT: int = _int_env("DEFAULT_ROW_COUNT", DEFAULT_ROW_COUNT)
    DEFAULT_COL_COUNT: int = _int_env("DEFAULT_COL_COUNT", DEFAULT_COL_COUNT)

    # Largest window (rows, then cells) a single request may materialize
    MAX_WINDOW_ROWS: int = _int_env("MAX_WINDOW_ROWS", DEFAULT_MAX_WINDOW_ROWS)
    MAX_WINDOW_CELLS: int = _int_env("MAX_WINDOW_CELLS", DEFAULT_MAX_WINDOW_CELLS)

    # Widest sheet that may be created, resized to or imported into
    MAX_COL_COUNT: int = _int_env("MAX_COL_COUNT", DEFAULT_MAX_COL_COUNT)

    # Largest upload accepted by POST /sheets/{id}/import
    MAX_IMPORT_BYTES: int = _int_env("MAX_IMPORT_BYTES", DEFAULT_MAX_IMPORT_BYTES)

    # CORS Settings (production only; other environments allow all origins)
    CORS_ALLOWED_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")
        if origin.strip()
    ]

    @classmethod
    def validate(cls) -> None:
        """
        Validate that all sizing settings are usable.

        Raises:
            ValueError: If any sizing setting was not an integer in the
                environment, or is not positive.
        """
        if _unparsed_env:
            details = ", ".join(f"{name}={raw!r}" for name, raw in _unparsed_env.items())
            raise ValueError(
                f"Settings must be integers: {details}. "
                "Please check your .env file."
            )

        sizing_settings = {
            "DEFAULT_ROW_COUNT": cls.DEFAULT_ROW_COUNT,
            "DEFAULT_COL_COUNT": cls.DEFAULT_COL_COUNT,
            "MAX_WINDOW_ROWS": cls.MAX_WINDOW_ROWS,
            "MAX_WINDOW_CELLS": cls.MAX_WINDOW_CELLS,
            "MAX_COL_COUNT": cls.MAX_COL_COUNT,
            "MAX_IMPORT_BYTES": cls.MAX_IMPORT_BYTES,
        }

        invalid = [key for key, value in sizing_settings.items() if value <= 0]

        if invalid:
            raise ValueError(
                f"Settings must be positive integers: {', '.join(invalid)}. "
                "Please check your .env file."
            )

        if cls.DEFAULT_COL_COUNT > cls.MAX_COL_COUNT:
            raise ValueError(
                f"DEFAULT_COL_COUNT ({cls.DEFAULT_COL_COUNT}) exceeds "
                f"MAX_COL_COUNT ({cls.MAX_COL_COUNT})."
            )

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment."""
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment."""
        return cls.ENVIRONMENT.lower() == "development"


# Create a singleton instance
settings = Settings()

# Validate settings on module import (will fail fast if misconfigured)
# Skip validation during tests or when importing for introspection
if os.getenv("VALIDATE_CONFIG", "true").lower() == "true":
    try:
        settings.validate()
    except ValueError as e:
        # In development, warn but don't crash
        if settings.is_development():
            print(f"Warning: {e}")
            print("   Sheets may be created with unusable defaults until you fix your .env file.")
        else:
            raise
