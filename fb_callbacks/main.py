"""FastAPI application initialization."""

import os
from contextlib import asynccontextmanager

import logfire
from fastapi import FastAPI

from fb_callbacks.api import deauth, health, webhook
from fb_callbacks.config import Settings, get_settings
from fb_callbacks.logging_config import mask_pii, setup_logfire, setup_sentry
from fb_callbacks.middleware.correlation_id import CorrelationIDMiddleware
from fb_callbacks.models.signed_request import DeauthPayload
from fb_callbacks.models.webhook_models import CallbackContext, WebhookPayload
from fb_callbacks.services.dispatcher import (
    DeauthCallback,
    DeauthDispatcher,
    WebhookCallback,
    WebhookDispatcher,
)
from fb_callbacks.services.response_mapper import ResponseMapper
from fb_callbacks.services.secret_resolver import (
    CredentialResolver,
    InMemoryCredentialStore,
    StaticCredentials,
)

VERSION = "0.1.0"


async def log_deauthorization(payload: DeauthPayload, context: CallbackContext) -> None:
    """Default deauthorization callback: record the event only."""
    logfire.info(
        "User deauthorized app",
        app_id=mask_pii(context.app_id),
        user_id=mask_pii(payload.user_id),
        correlation_id=context.correlation_id,
    )


async def log_webhook_event(payload: WebhookPayload, context: CallbackContext) -> None:
    """Default webhook callback: record the event only."""
    for entry in payload.entry:
        logfire.info(
            "Webhook entry received",
            app_id=mask_pii(context.app_id),
            object=payload.object,
            fields=[change.field for change in entry.changes],
            test_event=entry.is_test,
            correlation_id=context.correlation_id,
        )


def default_resolver(settings: Settings) -> CredentialResolver:
    """StaticCredentials from settings, or an empty store when unset."""
    if settings.facebook_app_id is not None and settings.facebook_app_secret:
        return StaticCredentials.from_settings(settings)

    logfire.warning(
        "FACEBOOK_APP_ID / FACEBOOK_APP_SECRET not set; every callback will answer 500"
    )
    return InMemoryCredentialStore()


def create_app(
    settings: Settings | None = None,
    resolver: CredentialResolver | None = None,
    deauth_callback: DeauthCallback | None = None,
    webhook_callback: WebhookCallback | None = None,
) -> FastAPI:
    """Build the callback service.

    Args:
        settings: Settings to use (defaults to get_settings())
        resolver: Credential lookup for app ids (defaults to settings credentials)
        deauth_callback: Called with each verified DeauthPayload
        webhook_callback: Called with each verified WebhookPayload
    """
    settings = settings or get_settings()
    resolver = resolver or default_resolver(settings)
    response_mapper = ResponseMapper(auth_failure_status=settings.auth_failure_status)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logfire(app, settings)
        sentry_enabled = setup_sentry(settings)

        logfire.info(
            "Application startup complete",
            environment=settings.env,
            sentry_enabled=sentry_enabled,
            deauth_path_prefix=settings.deauth_path_prefix,
            webhook_path_prefix=settings.webhook_path_prefix,
        )
        yield
        logfire.info("Application shutdown complete")

    app = FastAPI(
        title="Facebook Callbacks",
        description="Verified login deauthorization and webhook callbacks",
        version=VERSION,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.deauth_dispatcher = DeauthDispatcher(
        resolver,
        deauth_callback or log_deauthorization,
        response_mapper=response_mapper,
        max_body_bytes=settings.max_body_bytes,
    )
    app.state.webhook_dispatcher = WebhookDispatcher(
        resolver,
        webhook_callback or log_webhook_event,
        response_mapper=response_mapper,
        max_body_bytes=settings.max_body_bytes,
    )

    app.add_middleware(CorrelationIDMiddleware)

    app.include_router(health.router, tags=["health"])
    app.include_router(
        deauth.router, prefix=f"/{settings.deauth_path_prefix}", tags=["deauth"]
    )
    app.include_router(
        webhook.router, prefix=f"/{settings.webhook_path_prefix}", tags=["webhook"]
    )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        "fb_callbacks.main:app",
        host="0.0.0.0",
        port=port,
        reload=os.getenv("ENV") == "local",
    )
