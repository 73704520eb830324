"""Configuration for familyhub.

Every setting is looked up in the process environment first and then in
Streamlit secrets (``.streamlit/secrets.toml``), so Cloud Run and a local
``streamlit run`` read the same keys:

    ENVIRONMENT                 development | test | production
    GOOGLE_CLOUD_PROJECT        GCP project of the buckets
    GCS_PHOTOS_BUCKET           public-read bucket for photos and avatars
    GCS_DATABASE_BUCKET         optional bucket holding the DuckDB backup
    FAMILYHUB_DB_PATH           local DuckDB file
    FAMILYHUB_DATABASE_BACKUP   copy the DuckDB file to GCS after writes
    DEBUG                       show session state and error details
"""

import os
from typing import Any

try:
    import streamlit as st

    STREAMLIT_AVAILABLE = True
except ImportError:
    STREAMLIT_AVAILABLE = False

from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_DB_PATH = "/tmp/familyhub/family.db"  # nosec B108
DEVELOPMENT_ENVIRONMENTS = frozenset({"development", "dev", "local", "test"})
PRODUCTION_ENVIRONMENTS = frozenset({"production", "prod"})
TRUE_VALUES = frozenset({"true", "1", "yes", "on"})


def _from_secrets(key: str) -> Any:
    if not STREAMLIT_AVAILABLE:
        return None
    try:
        return st.secrets.get(key)
    except Exception:  # nosec B110
        # No secrets file, or not running under `streamlit run`
        return None


def _cast(key: str, value: Any, cast_type: type, default: Any) -> Any:
    if cast_type is bool:
        return value.strip().lower() in TRUE_VALUES if isinstance(value, str) else bool(value)
    if cast_type is str:
        return value
    try:
        return cast_type(value)
    except (ValueError, TypeError) as e:
        logger.warning("config_cast_failed", key=key, cast_type=cast_type.__name__, error=str(e))
        return default


class Config:
    """Cached settings lookup; call :meth:`clear_cache` after changing the environment."""

    def __init__(self) -> None:
        self._values: dict[tuple[str, str], Any] = {}

    def get(self, key: str, default: Any = None, cast_type: type = str) -> Any:
        """
        Look up a setting.

        Args:
            key: Setting name
            default: Value used when the setting is absent
            cast_type: str, bool, int or float

        Returns:
            The setting cast to ``cast_type``; ``default`` when absent or not castable
        """
        cache_key = (key, cast_type.__name__)
        if cache_key not in self._values:
            raw = os.getenv(key)
            if raw is None:
                raw = _from_secrets(key)
            self._values[cache_key] = default if raw is None else _cast(key, raw, cast_type, default)
        return self._values[cache_key]

    def get_required(self, key: str, cast_type: type = str) -> Any:
        """
        Raises:
            ValueError: If the setting is absent
        """
        value = self.get(key, cast_type=cast_type)
        if value is None:
            raise ValueError(f"Required configuration '{key}' not found")
        return value

    @property
    def environment(self) -> str:
        return str(self.get("ENVIRONMENT", "development")).strip().lower()

    def is_development(self) -> bool:
        return self.environment in DEVELOPMENT_ENVIRONMENTS

    def is_production(self) -> bool:
        return self.environment in PRODUCTION_ENVIRONMENTS

    def clear_cache(self) -> None:
        self._values.clear()


_config: Config | None = None


def get_config() -> Config:
    """Process-wide settings."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def is_development() -> bool:
    return get_config().is_development()


def get_database_path() -> str:
    """Local DuckDB file."""
    return str(get_config().get("FAMILYHUB_DB_PATH", DEFAULT_DB_PATH))


def is_database_backup_enabled() -> bool:
    """Whether the DuckDB file is copied to GCS after each write."""
    return bool(get_config().get("FAMILYHUB_DATABASE_BACKUP", True, bool))


def get_debug_mode() -> bool:
    return bool(get_config().get("DEBUG", False, bool))
