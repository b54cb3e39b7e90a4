"""
Centralized Observability Infrastructure.
Provides structured logging setup, Sentry SDK initialization
and the error sink the navigation core reports into.
"""

import logging
import re
from typing import Any, Dict, Optional, Protocol

import sentry_sdk

# Standard python logger initialization for the top-level app
log = logging.getLogger(__name__)

# Patterns to scrub in logs and Sentry events
SENSITIVE_PATTERNS = [
    re.compile(r"([a-zA-Z0-9_\-]{30,})"),  # Catch tokens/api-key looking strings
    re.compile(r"([a-z0-9]{32})", re.IGNORECASE),
]


class ErrorSink(Protocol):
    def report(self, error: BaseException, **context: Any) -> None: ...


def _mask_string(val: str) -> str:
    for pattern in SENSITIVE_PATTERNS:
        val = pattern.sub("[REDACTED]", val)
    return val


def _recursive_scrub(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {k: _recursive_scrub(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_recursive_scrub(i) for i in obj]
    elif isinstance(obj, str):
        return _mask_string(obj)
    return obj


def _scrub_sensitive_data(event: Dict[str, Any], hint: Dict[str, Any]) -> Dict[str, Any]:
    """
    Sentry before_send hook. Scrubs ID tokens, refresh tokens and API keys
    from stack-frame locals and breadcrumbs before they leave the process.
    """
    try:
        if "exception" in event and "values" in event["exception"]:
            for exc in event["exception"]["values"]:
                if "stacktrace" in exc and "frames" in exc["stacktrace"]:
                    for frame in exc["stacktrace"]["frames"]:
                        if "vars" in frame:
                            frame["vars"] = _recursive_scrub(frame["vars"])
        breadcrumbs = event.get("breadcrumbs")
        if isinstance(breadcrumbs, dict) and "values" in breadcrumbs:
            breadcrumbs["values"] = _recursive_scrub(breadcrumbs["values"])
    except Exception as e:
        log.warning(f"Sentry scrubber failed, sending event unscrubbed: {e}")

    return event


def setup_observability(log_level: str = "INFO", sentry_dsn: Optional[str] = None, sentry_env: str = "development") -> bool:
    """
    Initializes global system logging and Sentry (if DSN is present).
    Should be called once at application startup. Returns True when Sentry is active.
    """
    level = getattr(logging, str(log_level).upper(), logging.INFO)

    # Complete format: 2026-02-27 15:00:00 | INFO    | module.name | The message
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    sentry_active = False
    if sentry_dsn:
        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=sentry_env,
            traces_sample_rate=1.0,
            send_default_pii=False,
            before_send=_scrub_sensitive_data
        )
        sentry_active = True
        log.info(f"Sentry SDK initialized (env: {sentry_env})")
    else:
        log.info("SENTRY_DSN not provided. Running without Sentry.")

    # Quiet down noisy third-party loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)
    return sentry_active


def set_user_context(user_id: Optional[str], role: Optional[str]) -> None:
    """Tags subsequent Sentry events with the signed-in user (or clears the tag)."""
    if sentry_sdk.get_client().is_active():
        sentry_sdk.set_user({"id": user_id, "role": role} if user_id else None)


class SentryErrorSink:
    """Logs reported errors and forwards them to Sentry when a client is active."""

    def report(self, error: BaseException, **context: Any) -> None:
        try:
            log.error(f"{type(error).__name__}: {error}", extra={"context": context})
            if not sentry_sdk.get_client().is_active():
                return
            with sentry_sdk.new_scope() as scope:
                for key, value in context.items():
                    scope.set_tag(key, _mask_string(str(value)))
                sentry_sdk.capture_exception(error)
        except Exception as e:
            # Reporting failures must not affect navigation
            log.warning(f"Error sink delivery failed for {type(error).__name__}: {e}")
