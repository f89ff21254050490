"""Logfire and Sentry setup, plus helpers that keep secrets out of the logs.

App secrets, verify tokens and signed requests must never be recorded.
Platform ids (app ids, user ids) are recorded masked.
"""

import logging
from collections.abc import Mapping
from typing import Any

import logfire
import sentry_sdk
from fastapi import FastAPI
from sentry_sdk.integrations.fastapi import FastApiIntegration

from fb_callbacks.config import Settings, get_settings

# Attribute names Logfire scrubs on top of its defaults
SCRUBBED_ATTRIBUTES = ("signed_request", "verify_token", "app_secret", "x-hub-signature")

# Query / form keys replaced by REDACTED in redact_params
SENSITIVE_PARAMS = frozenset(
    {
        "hub.verify_token",
        "verify_token",
        "signed_request",
        "app_secret",
        "secret",
    }
)

REDACTED = "[redacted]"


def setup_logfire(app: FastAPI, settings: Settings | None = None) -> None:
    """
    Initialize and configure Pydantic Logfire for observability.

    Sets up:
    - FastAPI instrumentation (request/response tracing)
    - Pydantic instrumentation (payload model validation)
    - Environment-aware Python logging
    """
    settings = settings or get_settings()

    logfire_config: dict[str, Any] = {
        "environment": settings.env,
        "scrubbing": logfire.ScrubbingOptions(extra_patterns=list(SCRUBBED_ATTRIBUTES)),
    }
    if settings.logfire_token:
        logfire_config["token"] = settings.logfire_token

    logfire.configure(**logfire_config)
    logfire.instrument_fastapi(app)
    logfire.instrument_pydantic()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    if settings.env == "local":
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    else:
        logging.basicConfig(level=log_level, format="%(message)s")


def setup_sentry(settings: Settings) -> bool:
    """Start Sentry error tracking when a DSN is configured."""
    if not settings.sentry_dsn:
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.env,
        traces_sample_rate=settings.sentry_traces_sample_rate,
        # Request bodies carry signed requests
        send_default_pii=False,
        integrations=[FastApiIntegration()],
    )
    return True


def mask_pii(value: Any, mask_char: str = "*") -> str:
    """
    Mask an identifier, keeping only its first and last two characters.

    Args:
        value: Value to mask (ids arrive as int)
        mask_char: Character to use for masking

    Returns:
        Masked string
    """
    if value is None or value == "":
        return ""

    value = str(value)
    if len(value) <= 4:
        return mask_char * len(value)
    return f"{value[:2]}{mask_char * (len(value) - 4)}{value[-2:]}"


def redact_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of query or form parameters with the sensitive values masked."""
    return {
        key: REDACTED if key.lower() in SENSITIVE_PARAMS else value
        for key, value in params.items()
    }
