"""Signed request verification (login deauthorization callback).

A signed request is `<signature>.<payload>`, both parts base64url without
padding. The signature is HMAC-SHA256 over the *encoded* payload text, keyed
with the app secret. The payload names the algorithm it was signed with.

Reference:
    https://developers.facebook.com/docs/games/gamesonfacebook/login#parsingsr
"""

import base64
import binascii
import hashlib
import hmac
import json
import re
from datetime import datetime
from typing import Any, Callable, TypeVar

from pydantic import BaseModel, ValidationError

from fb_callbacks.constants import DEFAULT_SIGNED_REQUEST_ALGORITHM
from fb_callbacks.models.signed_request import DeauthPayload
from fb_callbacks.services.errors import CallbackProtocolError, ErrorKind

PayloadT = TypeVar("PayloadT", bound=BaseModel)

# Algorithms a payload may name, mapped to the digest constructor
SIGNED_REQUEST_ALGORITHMS: dict[str, Callable[..., Any]] = {
    DEFAULT_SIGNED_REQUEST_ALGORITHM: hashlib.sha256,
}

_BASE64URL_RE = re.compile(r"[A-Za-z0-9_-]+={0,2}")


def _secret_bytes(app_secret: str | bytes) -> bytes:
    if isinstance(app_secret, str):
        return app_secret.encode("utf-8")
    return app_secret


def b64url_decode(part: str) -> bytes:
    """Decode unpadded base64url text; raises ValueError on bad input."""
    if not _BASE64URL_RE.fullmatch(part):
        raise ValueError("invalid base64url alphabet")
    stripped = part.rstrip("=")
    try:
        decoded = base64.urlsafe_b64decode(stripped + "=" * (-len(stripped) % 4))
    except binascii.Error as e:
        raise ValueError(str(e)) from e
    # Reject texts whose unused trailing bits are set
    if b64url_encode(decoded) != stripped:
        raise ValueError("non-canonical base64url")
    return decoded


def b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def parse_signed_request(
    signed_request: str,
    app_secret: str | bytes,
    payload_model: type[PayloadT] = DeauthPayload,
) -> PayloadT:
    """Verify a signed request and return its decoded payload.

    Args:
        signed_request: The `<signature>.<payload>` token
        app_secret: App secret the platform signed with
        payload_model: Pydantic model the JSON payload is validated against

    Returns:
        The validated payload

    Raises:
        CallbackProtocolError: MALFORMED_TOKEN, ENCODING_INVALID,
            PAYLOAD_INVALID, ALGORITHM_UNSUPPORTED or SIGNATURE_MISMATCH
    """
    parts = signed_request.split(".")
    if len(parts) != 2 or not all(parts):
        raise CallbackProtocolError(
            ErrorKind.MALFORMED_TOKEN, "expected <signature>.<payload>"
        )
    encoded_signature, encoded_payload = parts

    try:
        signature = b64url_decode(encoded_signature)
    except ValueError as e:
        raise CallbackProtocolError(ErrorKind.ENCODING_INVALID, "signature", e) from e
    try:
        payload_bytes = b64url_decode(encoded_payload)
    except ValueError as e:
        raise CallbackProtocolError(ErrorKind.ENCODING_INVALID, "payload", e) from e

    try:
        payload = payload_model.model_validate_json(payload_bytes)
    except ValidationError as e:
        raise CallbackProtocolError(
            ErrorKind.PAYLOAD_INVALID, f"{e.error_count()} validation error(s)", e
        ) from e

    # Absent means the default; an empty name is as unknown as any other
    algorithm = getattr(payload, "algorithm", None)
    if algorithm is None:
        algorithm = DEFAULT_SIGNED_REQUEST_ALGORITHM
    digestmod = SIGNED_REQUEST_ALGORITHMS.get(algorithm)
    if digestmod is None:
        raise CallbackProtocolError(ErrorKind.ALGORITHM_UNSUPPORTED, algorithm)

    # Signed over the base64url text as transmitted, never a re-encoding
    expected = hmac.new(
        _secret_bytes(app_secret), encoded_payload.encode("ascii"), digestmod
    ).digest()
    if not hmac.compare_digest(signature, expected):
        raise CallbackProtocolError(ErrorKind.SIGNATURE_MISMATCH)

    return payload


def encode_signed_request(
    payload: BaseModel | dict[str, Any],
    app_secret: str | bytes,
) -> str:
    """Build a signed request the way the platform does.

    Useful for local testing of the deauthorization callback.
    """
    if isinstance(payload, BaseModel):
        # Timestamps travel as Unix seconds
        data = {
            k: int(v.timestamp()) if isinstance(v, datetime) else v
            for k, v in payload.model_dump().items()
        }
    else:
        data = dict(payload)
    data.setdefault("algorithm", DEFAULT_SIGNED_REQUEST_ALGORITHM)

    digestmod = SIGNED_REQUEST_ALGORITHMS.get(data["algorithm"])
    if digestmod is None:
        raise ValueError(f"unsupported algorithm {data['algorithm']!r}")

    encoded_payload = b64url_encode(
        json.dumps(data, separators=(",", ":")).encode("utf-8")
    )
    signature = hmac.new(
        _secret_bytes(app_secret), encoded_payload.encode("ascii"), digestmod
    ).digest()
    return f"{b64url_encode(signature)}.{encoded_payload}"
