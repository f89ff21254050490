"""Webhook subscription verification (the `hub.challenge` handshake).

Runs once when the subscription is set up: the platform sends a GET with
`hub.mode`, `hub.challenge` and `hub.verify_token`, and expects the challenge
echoed back when the verify token matches.

Reference:
    https://developers.facebook.com/docs/graph-api/webhooks/getting-started#verification-requests
"""

import hmac
from collections.abc import Mapping
from urllib.parse import parse_qsl

from pydantic import ValidationError

from fb_callbacks.constants import SUBSCRIBE_MODE
from fb_callbacks.models.webhook_models import HandshakeQuery
from fb_callbacks.services.errors import CallbackProtocolError, ErrorKind


def parse_handshake_query(query: str | Mapping[str, str]) -> HandshakeQuery:
    """Parse a raw query string or an already split query mapping.

    Raises:
        CallbackProtocolError: QUERY_INVALID when a parameter is missing or
            the challenge is not a 64-bit integer
    """
    if isinstance(query, str):
        query = dict(parse_qsl(query, keep_blank_values=True))
    try:
        return HandshakeQuery.model_validate(dict(query))
    except ValidationError as e:
        missing = [
            str(err["loc"][0]) for err in e.errors() if err["type"] == "missing"
        ]
        detail = f"missing field {', '.join(missing)}" if missing else "invalid field"
        raise CallbackProtocolError(ErrorKind.QUERY_INVALID, detail, e) from e


def verify_handshake(query: HandshakeQuery, expected_token: str) -> int:
    """Return the challenge to echo back.

    Raises:
        CallbackProtocolError: MODE_MISMATCH or TOKEN_MISMATCH
    """
    if query.mode != SUBSCRIBE_MODE:
        raise CallbackProtocolError(ErrorKind.MODE_MISMATCH)

    if not hmac.compare_digest(
        query.verify_token.encode("utf-8"), expected_token.encode("utf-8")
    ):
        raise CallbackProtocolError(ErrorKind.TOKEN_MISMATCH)

    return query.challenge
