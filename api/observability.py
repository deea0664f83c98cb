"""
Logging setup and Sentry error tracking.

Sentry is enabled only when SENTRY_DSN is configured.
"""
import logging

import sentry_sdk
from sentry_sdk.integrations.flask import FlaskIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from services.errors import ServiceError

logger = logging.getLogger(__name__)

SENSITIVE_HEADERS = ("authorization", "cookie", "x-api-key")
QUIET_TRANSACTIONS = ("/health", "/api/v1/health")


def configure_logging(app) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger().setLevel(level)


def _filter_events(event: dict, hint: dict):
    """Drop expected domain errors and scrub credentials."""
    if "exc_info" in hint:
        _, exc_value, _ = hint["exc_info"]
        if isinstance(exc_value, ServiceError):
            return None

    headers = event.get("request", {}).get("headers")
    if isinstance(headers, dict):
        for key in list(headers.keys()):
            if key.lower() in SENSITIVE_HEADERS:
                headers[key] = "[Filtered]"
    return event


def _filter_transactions(event: dict, hint: dict):
    if event.get("transaction", "") in QUIET_TRANSACTIONS:
        return None
    return event


def init_sentry(app) -> bool:
    """
    Initialize Sentry error tracking.
    Returns True if initialized, False if skipped.
    """
    dsn = app.config.get("SENTRY_DSN")
    if not dsn:
        logger.info("SENTRY_DSN not set - error tracking disabled")
        return False

    env = app.config.get("APP_ENV", "dev")
    sentry_sdk.init(
        dsn=dsn,
        environment=env,
        traces_sample_rate=0.1 if env in ("prod", "production") else 1.0,
        integrations=[
            FlaskIntegration(transaction_style="url"),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        send_default_pii=False,
        before_send=_filter_events,
        before_send_transaction=_filter_transactions,
    )
    logger.info("Sentry initialized for %s", env)
    return True
