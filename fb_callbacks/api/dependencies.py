"""Request helpers shared by the callback routers."""

from typing import Annotated

from fastapi import Path, Request

from fb_callbacks.constants import U64_MAX
from fb_callbacks.services.dispatcher import DeauthDispatcher, WebhookDispatcher

AppIdPath = Annotated[int, Path(ge=0, le=U64_MAX, description="Facebook App ID")]


def get_deauth_dispatcher(request: Request) -> DeauthDispatcher:
    return request.app.state.deauth_dispatcher


def get_webhook_dispatcher(request: Request) -> WebhookDispatcher:
    return request.app.state.webhook_dispatcher


def get_correlation_id(request: Request) -> str | None:
    return getattr(request.state, "correlation_id", None)


async def read_body(request: Request, limit: int) -> bytes:
    """Read the body, stopping once it grows past `limit`.

    The returned bytes are longer than `limit` exactly when the body was
    too large, which the dispatcher reports as BODY_TOO_LARGE.
    """
    body = bytearray()
    async for chunk in request.stream():
        body += chunk
        if len(body) > limit:
            break
    return bytes(body)


def raw_header(request: Request, name: str) -> bytes | None:
    """Return a header value as the raw bytes received."""
    key = name.lower().encode("latin-1")
    for header_name, value in request.headers.raw:
        if header_name.lower() == key:
            return value
    return None
