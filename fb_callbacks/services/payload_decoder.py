"""Decoding of verified webhook bodies into typed payloads."""

from pydantic import TypeAdapter, ValidationError

from fb_callbacks.models.permissions import Permission, parse_permission
from fb_callbacks.models.webhook_models import WebhookPayload
from fb_callbacks.services.errors import CallbackProtocolError, ErrorKind

_webhook_payload_adapter: TypeAdapter[WebhookPayload] = TypeAdapter(WebhookPayload)


def decode_webhook_payload(body: bytes | str) -> WebhookPayload:
    """Decode an event notification body.

    Only call this on a body whose signature has already been verified.

    Raises:
        CallbackProtocolError: PAYLOAD_DECODE_FAILED for invalid JSON, an
            unknown `object` or `field`, or a malformed entry
    """
    try:
        return _webhook_payload_adapter.validate_json(body)
    except ValidationError as e:
        raise CallbackProtocolError(
            ErrorKind.PAYLOAD_DECODE_FAILED,
            f"{e.error_count()} validation error(s)",
            e,
        ) from e


def decode_permission(name: str) -> Permission:
    """Decode a permission name into the open Permission type."""
    return parse_permission(name)
