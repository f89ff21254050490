"""Verified Facebook login deauthorization and webhook callbacks."""

from fb_callbacks.models.signed_request import DeauthPayload
from fb_callbacks.models.webhook_models import (
    CallbackContext,
    HandshakeQuery,
    InstagramPayload,
    PassBackResponse,
    PermissionsPayload,
    WebhookPayload,
)
from fb_callbacks.services.dispatcher import DeauthDispatcher, WebhookDispatcher
from fb_callbacks.services.errors import (
    CallbackProtocolError,
    ErrorKind,
    SecretNotFoundError,
)
from fb_callbacks.services.secret_resolver import (
    InMemoryCredentialStore,
    StaticCredentials,
)

__all__ = [
    "CallbackContext",
    "CallbackProtocolError",
    "DeauthDispatcher",
    "DeauthPayload",
    "ErrorKind",
    "HandshakeQuery",
    "InMemoryCredentialStore",
    "InstagramPayload",
    "PassBackResponse",
    "PermissionsPayload",
    "SecretNotFoundError",
    "StaticCredentials",
    "WebhookDispatcher",
    "WebhookPayload",
]
