"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

_ALLOWED_APP_MODES = {"cloud"}

DEFAULT_SCAN_USER_AGENT = "Mozilla/5.0 (compatible; CRM-Scanner/1.0)"


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _require_app_mode() -> str:
    """
    Read and validate APP_MODE from the environment.

    APP_MODE must be explicitly set to 'cloud'. Any other value, or the
    absence of the variable, raises RuntimeError to prevent silent local
    fallback behaviour.
    """

    _load_env_once()
    raw = os.getenv("APP_MODE")
    if raw is None:
        raise RuntimeError("APP_MODE must be explicitly set to 'cloud'.")
    mode = raw.strip().lower()
    if mode not in _ALLOWED_APP_MODES:
        raise RuntimeError(
            f"APP_MODE '{raw.strip()}' is not valid. "
            f"Allowed values: {sorted(_ALLOWED_APP_MODES)}."
        )
    return mode


@dataclass(frozen=True)
class AppSettings:
    """
    Top-level application mode settings.
    """

    mode: str


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """
    Return cached application settings.

    Raises RuntimeError if APP_MODE is missing or not set to 'cloud'.
    """

    return AppSettings(mode=_require_app_mode())


def _get_int_env(name: str, default: int) -> int:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class DealScanSettings:
    """
    Runtime settings for asset page scans.

    Page fetches are never retried; the operator re-triggers a failed scan.
    """

    timeout_seconds: float = 15.0
    user_agent: str = DEFAULT_SCAN_USER_AGENT
    history_limit: int = 20
    max_page_bytes: int = 5_000_000


@lru_cache(maxsize=1)
def get_deal_scan_settings() -> DealScanSettings:
    """
    Return cached scan settings from environment variables.
    """

    return DealScanSettings(
        timeout_seconds=max(1.0, _get_float_env("DEAL_SCAN_TIMEOUT_SECONDS", 15.0)),
        user_agent=_get_str_env("DEAL_SCAN_USER_AGENT", DEFAULT_SCAN_USER_AGENT),
        history_limit=max(1, _get_int_env("DEAL_SCAN_HISTORY_LIMIT", 20)),
        max_page_bytes=max(1024, _get_int_env("DEAL_SCAN_MAX_PAGE_BYTES", 5_000_000)),
    )
