"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class ManualInputSettings:
    """
    Runtime settings for manual funnel input submissions.
    """

    max_rows: int = 400
    max_channel_rows: int = 5000
    default_currency: str = "USD"
    default_timezone: str = "Asia/Almaty"
    log_validation_issues: bool = True


@dataclass(frozen=True)
class APISettings:
    """
    HTTP surface settings.
    """

    title: str = "Manual Metrics API"
    owner_header: str = "X-Owner-Id"
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_manual_input_settings() -> ManualInputSettings:
    """
    Return cached manual input settings from environment variables.
    """

    return ManualInputSettings(
        max_rows=max(1, _get_int_env("MANUAL_INPUT_MAX_ROWS", 400)),
        max_channel_rows=max(0, _get_int_env("MANUAL_INPUT_MAX_CHANNEL_ROWS", 5000)),
        default_currency=_get_str_env("MANUAL_INPUT_DEFAULT_CURRENCY", "USD").upper(),
        default_timezone=_get_str_env("MANUAL_INPUT_DEFAULT_TIMEZONE", "Asia/Almaty"),
        log_validation_issues=_get_bool_env("MANUAL_INPUT_LOG_VALIDATION_ISSUES", True),
    )


@lru_cache(maxsize=1)
def get_api_settings() -> APISettings:
    """
    Return cached API settings from environment variables.
    """

    return APISettings(
        title=_get_str_env("API_TITLE", "Manual Metrics API"),
        owner_header=_get_str_env("API_OWNER_HEADER", "X-Owner-Id"),
        log_level=_get_str_env("LOG_LEVEL", "INFO").upper(),
    )
