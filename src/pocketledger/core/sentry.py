"""Sentry error tracking configuration and initialization."""

import os
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.utils import BadDsn

from pocketledger.core.logging import get_logger

logger = get_logger(__name__)

# Guard against multiple initializations
_sentry_initialized = False


def init_sentry() -> None:
    """
    Initialize Sentry SDK for error tracking.

    Only initializes if SENTRY_DSN environment variable is set and valid.
    No DSN means no init, so local use needs no account.
    Repeated calls are no-ops.

    Configuration:
    - Disables performance monitoring
    - No default PII (IP addresses are only sent as explicit context)
    - Logging integration disabled to avoid duplication with structlog
    """
    global _sentry_initialized

    if _sentry_initialized:
        return

    sentry_dsn = os.getenv("SENTRY_DSN")
    if not sentry_dsn:
        logger.info("sentry.disabled", message="Sentry DSN not found, error tracking disabled")
        return

    # Placeholder values like "xxx" are not DSNs
    sentry_dsn_stripped = sentry_dsn.strip()
    if not sentry_dsn_stripped.startswith(("https://", "http://")):
        logger.info(
            "sentry.disabled",
            message="Sentry DSN appears to be invalid or placeholder, error tracking disabled",
            dsn_preview=sentry_dsn_stripped[:20] + "..." if len(sentry_dsn_stripped) > 20 else sentry_dsn_stripped,
        )
        return

    environment = os.getenv("ENVIRONMENT", "development")

    try:
        sentry_sdk.init(
            dsn=sentry_dsn_stripped,
            environment=environment,
            traces_sample_rate=0.0,
            send_default_pii=False,
            integrations=[
                LoggingIntegration(level=None, event_level=None),  # Don't duplicate logs
            ],
        )

        _sentry_initialized = True
        logger.info(
            "sentry.initialized", message="Sentry error tracking enabled", environment=environment
        )
    except BadDsn as exc:
        logger.warning(
            "sentry.init_failed",
            message="Failed to initialize Sentry due to invalid DSN, error tracking disabled",
            error=str(exc),
        )


def report_exception(exc: BaseException, **context: Any) -> None:
    """Send ``exc`` to Sentry with ``context`` attached. No-op when Sentry is off."""
    if not _sentry_initialized:
        return

    with sentry_sdk.new_scope() as scope:
        if context:
            scope.set_context("pocketledger", context)
        sentry_sdk.capture_exception(exc)
