"""Webhook event notification signature (`X-Hub-Signature`) verification.

The header value is `sha1=<hex>`: an HMAC-SHA1 of the raw request body keyed
with the app secret. Verification runs on the raw bytes, before any JSON
parsing.

Reference:
    https://developers.facebook.com/docs/graph-api/webhooks/getting-started#event-notifications
"""

import hashlib
import hmac
import string
from typing import NamedTuple

from fb_callbacks.constants import SIGNATURE_HEX_LENGTHS
from fb_callbacks.services.errors import CallbackProtocolError, ErrorKind

_DIGESTS = {
    "sha1": hashlib.sha1,
}

_HEX_DIGITS = frozenset(string.hexdigits)


class HubSignature(NamedTuple):
    algorithm: str
    hexdigest: str


def parse_signature_header(header_value: bytes | str) -> HubSignature:
    """Parse `algorithm=hexvalue`.

    Raises:
        CallbackProtocolError: HEADER_INVALID on any format problem
    """
    if isinstance(header_value, bytes):
        try:
            header_value = header_value.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CallbackProtocolError(
                ErrorKind.HEADER_INVALID, "header invalid", e
            ) from e

    parts = header_value.split("=")
    if len(parts) != 2:
        raise CallbackProtocolError(ErrorKind.HEADER_INVALID, "header invalid")
    algorithm, value = parts

    expected_length = SIGNATURE_HEX_LENGTHS.get(algorithm)
    if expected_length is None:
        raise CallbackProtocolError(ErrorKind.HEADER_INVALID, "algorithm unknown")
    if len(value) != expected_length or not _HEX_DIGITS.issuperset(value):
        raise CallbackProtocolError(ErrorKind.HEADER_INVALID, "value length invalid")

    return HubSignature(algorithm=algorithm, hexdigest=value.lower())


def sign_body(body: bytes, app_secret: str | bytes, algorithm: str = "sha1") -> str:
    """Return the lowercase hex HMAC of `body`."""
    if isinstance(app_secret, str):
        app_secret = app_secret.encode("utf-8")
    return hmac.new(app_secret, body, _DIGESTS[algorithm]).hexdigest()


def signature_header_value(
    body: bytes, app_secret: str | bytes, algorithm: str = "sha1"
) -> str:
    """Build the header value the platform would send for `body`."""
    return f"{algorithm}={sign_body(body, app_secret, algorithm)}"


def verify_payload(
    header_value: bytes | str,
    body: bytes,
    app_secret: str | bytes,
) -> None:
    """Check the signature header against the raw request body.

    Raises:
        CallbackProtocolError: HEADER_INVALID or SIGNATURE_MISMATCH
    """
    signature = parse_signature_header(header_value)
    expected = sign_body(body, app_secret, signature.algorithm)

    if not hmac.compare_digest(expected, signature.hexdigest):
        raise CallbackProtocolError(ErrorKind.SIGNATURE_MISMATCH)
