"""Runtime settings sourced from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict

from repokit.errors import ConfigurationError


DEFAULT_DATABASE_URL = "sqlite+pysqlite:///:memory:"
DEFAULT_PER_PAGE = 15


@dataclass(frozen=True)
class SettingDefinition:
    env_var: str
    default: object


_SETTING_DEFINITIONS: Dict[str, SettingDefinition] = {
    "database_url": SettingDefinition("REPOKIT_DATABASE_URL", DEFAULT_DATABASE_URL),
    "db_echo": SettingDefinition("REPOKIT_DB_ECHO", False),
    "strict_hydration": SettingDefinition("REPOKIT_STRICT_HYDRATION", False),
    "default_per_page": SettingDefinition("REPOKIT_DEFAULT_PER_PAGE", DEFAULT_PER_PAGE),
}


@dataclass(frozen=True)
class Settings:
    database_url: str
    db_echo: bool
    strict_hydration: bool


def _normalize_bool(value: str | None, default: bool = False) -> bool:
    """Return normalized boolean from environment-style value."""
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"", "0", "false", "no", "off"}:
        return False
    if normalized in {"1", "true", "yes", "on"}:
        return True
    return default


def _normalize_positive_int(env_var: str, value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value.strip())
    except ValueError as e:
        raise ConfigurationError(f"{env_var} must be an integer, got {value!r}") from e
    if parsed < 1:
        raise ConfigurationError(f"{env_var} must be at least 1, got {parsed}")
    return parsed


def _raw(key: str) -> str | None:
    return os.getenv(_SETTING_DEFINITIONS[key].env_var)


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """Return the cached settings state sourced from the environment."""
    defs = _SETTING_DEFINITIONS
    database_url = (_raw("database_url") or "").strip() or defs["database_url"].default
    return Settings(
        database_url=database_url,
        db_echo=_normalize_bool(_raw("db_echo"), default=defs["db_echo"].default),
        strict_hydration=_normalize_bool(
            _raw("strict_hydration"), default=defs["strict_hydration"].default
        ),
    )


@lru_cache(maxsize=None)
def default_per_page() -> int:
    """Page size used when ``paginate`` is called without one.

    Parsed on first use so a bad value only affects pagination.
    """
    definition = _SETTING_DEFINITIONS["default_per_page"]
    return _normalize_positive_int(
        definition.env_var, _raw("default_per_page"), definition.default
    )


def strict_hydration_enabled() -> bool:
    """Whether entities reject unknown keys and malformed text by default."""
    return get_settings().strict_hydration


def refresh_settings() -> None:
    """Invalidate cached settings (useful for tests)."""
    get_settings.cache_clear()
    default_per_page.cache_clear()
