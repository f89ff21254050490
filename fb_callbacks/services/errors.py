"""Structured errors raised while verifying and dispatching callbacks.

Every failure carries an `ErrorKind`; the response mapper turns the kind
into an HTTP status, so the kinds must stay one-to-one with the status table.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    # Structural (client) failures
    MALFORMED_TOKEN = "MalformedToken"
    FORM_INVALID = "FormInvalid"
    QUERY_INVALID = "QueryInvalid"
    HEADER_INVALID = "HeaderInvalid"
    BODY_TOO_LARGE = "BodyTooLarge"

    # Encoding failures
    ENCODING_INVALID = "EncodingInvalid"
    PAYLOAD_INVALID = "PayloadInvalid"

    # Authentication failures
    ALGORITHM_UNSUPPORTED = "AlgorithmUnsupported"
    SIGNATURE_MISMATCH = "SignatureMismatch"

    # Handshake failures
    MODE_MISMATCH = "ModeMismatch"
    TOKEN_MISMATCH = "TokenMismatch"

    # Server-side failures
    PAYLOAD_DECODE_FAILED = "PayloadDecodeFailed"
    SECRET_UNRESOLVED = "SecretUnresolved"
    CALLBACK_FAILED = "CallbackFailed"


class CallbackProtocolError(Exception):
    """A failure of one step of the callback protocol.

    Args:
        kind: Which failure occurred
        message: Human readable detail, safe to return to the caller
        cause: Underlying exception, if any
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str | None = None,
        cause: BaseException | None = None,
    ):
        self.kind = kind
        self.message = message
        self.cause = cause
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.message:
            return f"{self.kind.value} {self.message}"
        return self.kind.value

    def __repr__(self) -> str:
        return f"CallbackProtocolError(kind={self.kind!r}, message={self.message!r})"


class SecretNotFoundError(LookupError):
    """Raised by resolvers when no credential is registered for an app id."""

    def __init__(self, app_id: int | str, what: str = "app secret"):
        self.app_id = app_id
        super().__init__(f"{what} not found for app id {app_id}")
