"""Correlation ID middleware for request tracing.

The id is stored on `request.state.correlation_id`, forwarded to callbacks
through CallbackContext and echoed in the response headers.
"""

import uuid
from typing import Callable

import logfire
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from fb_callbacks.logging_config import redact_params

# Longest caller-supplied id that is reused as is
MAX_CORRELATION_ID_LENGTH = 128


def _usable(value: str | None) -> bool:
    return bool(value) and len(value) <= MAX_CORRELATION_ID_LENGTH and value.isprintable()


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Attach a correlation ID to every request.

    Reuses the caller's header when it is short and printable, otherwise
    generates a UUID4.
    """

    def __init__(self, app: ASGIApp, header_name: str = "X-Correlation-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming = request.headers.get(self.header_name)
        correlation_id = incoming if _usable(incoming) else str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        with logfire.span(
            "callback request {method} {path}",
            method=request.method,
            path=request.url.path,
            query=redact_params(request.query_params),
            correlation_id=correlation_id,
        ):
            response = await call_next(request)

        response.headers[self.header_name] = correlation_id
        return response
