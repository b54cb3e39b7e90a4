"""
Runtime settings.

Resolution order for every key: Streamlit secrets (`.streamlit/secrets.toml`),
then environment variables, then the default below.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

import streamlit as st
from streamlit.errors import StreamlitAPIException

log = logging.getLogger(__name__)


def get_secret(key: str) -> Optional[Any]:
    try:
        return st.secrets.get(key)
    except (FileNotFoundError, StreamlitAPIException):
        # No secrets.toml configured
        return None


def get_setting(key: str, default: Optional[str] = None) -> Optional[str]:
    value = get_secret(key)
    if value is None or value == "":
        value = os.getenv(key)
    if value is None or value == "":
        return default
    return str(value).strip()


def _float_setting(key: str, default: float) -> float:
    raw = get_setting(key)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        log.warning(f"Invalid {key}={raw!r}, falling back to {default}")
        return default
    if value < 0:
        log.warning(f"Negative {key}={raw!r}, falling back to {default}")
        return default
    return value


def _int_setting(key: str, default: int) -> int:
    raw = get_setting(key)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        log.warning(f"Invalid {key}={raw!r}, falling back to {default}")
        return default
    if value < 1:
        log.warning(f"{key} must be at least 1, falling back to {default}")
        return default
    return value


@dataclass(frozen=True)
class AppSettings:
    splash_delay_seconds: float = 1.7
    profile_collection: str = "users"
    profile_resolve_workers: int = 4
    firebase_web_api_key: Optional[str] = None
    firebase_credentials: Optional[str] = None
    auth_timeout_seconds: float = 15.0
    log_level: str = "INFO"
    sentry_dsn: Optional[str] = None
    sentry_env: str = "development"


def load_settings() -> AppSettings:
    defaults = AppSettings()
    return AppSettings(
        splash_delay_seconds=_float_setting("SPLASH_DELAY_SECONDS", defaults.splash_delay_seconds),
        profile_collection=get_setting("PROFILE_COLLECTION", defaults.profile_collection),
        profile_resolve_workers=_int_setting("PROFILE_RESOLVE_WORKERS", defaults.profile_resolve_workers),
        firebase_web_api_key=get_setting("FIREBASE_WEB_API_KEY"),
        firebase_credentials=get_setting("FIREBASE_CREDENTIALS") or get_setting("GOOGLE_APPLICATION_CREDENTIALS"),
        auth_timeout_seconds=_float_setting("AUTH_TIMEOUT_SECONDS", defaults.auth_timeout_seconds),
        log_level=get_setting("LOG_LEVEL", defaults.log_level).upper(),
        sentry_dsn=get_setting("SENTRY_DSN"),
        sentry_env=get_setting("SENTRY_ENV", defaults.sentry_env),
    )
