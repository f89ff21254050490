"""Verification-and-dispatch of platform callbacks.

Each request goes through the same pipeline:
1. Resolve the app secret (or verify token) for the app id in the path
2. Verify the request signature
3. Decode the payload
4. Invoke the integrator callback with the payload and a CallbackContext
5. Map the outcome to a PassBackResponse

Dispatchers hold no per-request state, so one instance serves concurrent
requests. The callback is invoked at most once per request, and only after
verification and decoding succeeded.
"""

from collections.abc import Awaitable, Callable, Mapping
from typing import Any
from urllib.parse import parse_qsl

import logfire

from fb_callbacks.constants import MAX_BODY_BYTES, SIGNED_REQUEST_FORM_KEY
from fb_callbacks.logging_config import mask_pii
from fb_callbacks.models.signed_request import DeauthPayload
from fb_callbacks.models.webhook_models import (
    CallbackContext,
    HandshakeQuery,
    PassBackResponse,
    WebhookPayload,
)
from fb_callbacks.services.errors import CallbackProtocolError, ErrorKind
from fb_callbacks.services.handshake import parse_handshake_query, verify_handshake
from fb_callbacks.services.hub_signature import verify_payload
from fb_callbacks.services.payload_decoder import decode_webhook_payload
from fb_callbacks.services.response_mapper import ResponseMapper
from fb_callbacks.services.secret_resolver import (
    AppSecretResolver,
    CredentialResolver,
)
from fb_callbacks.services.signed_request import parse_signed_request

DeauthCallback = Callable[[DeauthPayload, CallbackContext], Awaitable[Any]]
WebhookCallback = Callable[[WebhookPayload, CallbackContext], Awaitable[Any]]


def extract_signed_request(body: bytes) -> str:
    """Pull the `signed_request` field out of a form-urlencoded body."""
    try:
        form = parse_qsl(body.decode("utf-8"), keep_blank_values=True)
    except UnicodeDecodeError as e:
        raise CallbackProtocolError(ErrorKind.FORM_INVALID, "form invalid", e) from e

    for key, value in form:
        if key == SIGNED_REQUEST_FORM_KEY:
            return value
    raise CallbackProtocolError(
        ErrorKind.FORM_INVALID, f"{SIGNED_REQUEST_FORM_KEY} missing"
    )


class _Dispatcher:
    protocol = ""

    def __init__(
        self,
        response_mapper: ResponseMapper | None = None,
        max_body_bytes: int = MAX_BODY_BYTES,
    ):
        self.response_mapper = response_mapper or ResponseMapper()
        self.max_body_bytes = max_body_bytes

    def _check_body_size(self, body: bytes) -> None:
        if len(body) > self.max_body_bytes:
            raise CallbackProtocolError(
                ErrorKind.BODY_TOO_LARGE,
                f"{len(body)} bytes exceeds {self.max_body_bytes}",
            )

    async def _resolve(self, lookup: Callable[[int], Awaitable[str]], app_id: int) -> str:
        try:
            return await lookup(app_id)
        except Exception as e:
            raise CallbackProtocolError(ErrorKind.SECRET_UNRESOLVED, str(e), e) from e

    async def _invoke(
        self,
        callback: Callable[[Any, CallbackContext], Awaitable[Any]],
        payload: Any,
        context: CallbackContext,
    ) -> None:
        try:
            await callback(payload, context)
        except Exception as e:
            raise CallbackProtocolError(ErrorKind.CALLBACK_FAILED, str(e), e) from e

    def _fail(self, error: CallbackProtocolError, app_id: int) -> PassBackResponse:
        response = self.response_mapper.failure(error)
        log = logfire.error if response.status_code >= 500 else logfire.warning
        log(
            "Callback request rejected",
            protocol=self.protocol,
            app_id=mask_pii(app_id),
            error_kind=error.kind.value,
            status_code=response.status_code,
            error_type=type(error.cause).__name__ if error.cause else None,
        )
        return response


class DeauthDispatcher(_Dispatcher):
    """Login deauthorization callback (signed request in a form POST).

    Example:
        >>> dispatcher = DeauthDispatcher(resolver, on_deauthorized)
        >>> response = await dispatcher.pass_back(app_id, body)
        >>> response.status_code
        200
    """

    protocol = "fb_login_deauth_callback"

    def __init__(
        self,
        resolver: AppSecretResolver,
        callback: DeauthCallback,
        response_mapper: ResponseMapper | None = None,
        max_body_bytes: int = MAX_BODY_BYTES,
    ):
        super().__init__(response_mapper, max_body_bytes)
        self.resolver = resolver
        self.callback = callback

    async def check_app(self, app_id: int) -> PassBackResponse:
        """Answer the callback URL check: 200 when the app secret resolves."""
        try:
            await self._resolve(self.resolver.get_app_secret, app_id)
        except CallbackProtocolError as e:
            return self._fail(e, app_id)
        return self.response_mapper.success()

    async def pass_back(
        self,
        app_id: int,
        body: bytes,
        correlation_id: str | None = None,
    ) -> PassBackResponse:
        """Handle a form-urlencoded POST body."""
        try:
            self._check_body_size(body)
            signed_request = extract_signed_request(body)
        except CallbackProtocolError as e:
            return self._fail(e, app_id)

        return await self.pass_back_with_signed_request(
            app_id, signed_request, correlation_id
        )

    async def pass_back_with_signed_request(
        self,
        app_id: int,
        signed_request: str,
        correlation_id: str | None = None,
    ) -> PassBackResponse:
        try:
            app_secret = await self._resolve(self.resolver.get_app_secret, app_id)
            payload = parse_signed_request(signed_request, app_secret, DeauthPayload)
            context = CallbackContext(app_id=app_id, correlation_id=correlation_id)
            await self._invoke(self.callback, payload, context)
        except CallbackProtocolError as e:
            return self._fail(e, app_id)

        logfire.info(
            "Deauthorization callback handled",
            app_id=mask_pii(app_id),
            user_id=mask_pii(payload.user_id),
            issued_at=payload.issued_at.isoformat(),
        )
        return self.response_mapper.success()


class WebhookDispatcher(_Dispatcher):
    """Webhooks: subscription handshake and signed event notifications."""

    protocol = "fb_webhooks"

    def __init__(
        self,
        resolver: CredentialResolver,
        callback: WebhookCallback,
        response_mapper: ResponseMapper | None = None,
        max_body_bytes: int = MAX_BODY_BYTES,
    ):
        super().__init__(response_mapper, max_body_bytes)
        self.resolver = resolver
        self.callback = callback

    async def verify_subscription(
        self,
        app_id: int,
        query: str | Mapping[str, str] | HandshakeQuery,
    ) -> PassBackResponse:
        """Answer a verification request with the challenge as plain text."""
        try:
            if not isinstance(query, HandshakeQuery):
                query = parse_handshake_query(query)
            verify_token = await self._resolve(self.resolver.get_verify_token, app_id)
            challenge = verify_handshake(query, verify_token)
        except CallbackProtocolError as e:
            return self._fail(e, app_id)

        logfire.info("Webhook subscription verified", app_id=mask_pii(app_id))
        return self.response_mapper.success(body=str(challenge))

    async def pass_back(
        self,
        app_id: int,
        signature_header: bytes | str | None,
        body: bytes,
        correlation_id: str | None = None,
    ) -> PassBackResponse:
        """Handle an event notification POST."""
        try:
            self._check_body_size(body)
            if signature_header is None:
                raise CallbackProtocolError(ErrorKind.HEADER_INVALID, "header missing")
            app_secret = await self._resolve(self.resolver.get_app_secret, app_id)
            verify_payload(signature_header, body, app_secret)
            payload = decode_webhook_payload(body)
            context = CallbackContext(app_id=app_id, correlation_id=correlation_id)
            await self._invoke(self.callback, payload, context)
        except CallbackProtocolError as e:
            return self._fail(e, app_id)

        logfire.info(
            "Webhook event notification handled",
            app_id=mask_pii(app_id),
            object=payload.object,
            entry_count=len(payload.entry),
            test_event=bool(payload.entry) and all(e.is_test for e in payload.entry),
        )
        return self.response_mapper.success()
