"""Mapping of protocol failures to HTTP responses."""

from fastapi import status

from fb_callbacks.models.webhook_models import PassBackResponse
from fb_callbacks.services.errors import CallbackProtocolError, ErrorKind

# Kinds whose status is decided by the auth failure policy
AUTH_FAILURE_KINDS = frozenset(
    {ErrorKind.ALGORITHM_UNSUPPORTED, ErrorKind.SIGNATURE_MISMATCH}
)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.MALFORMED_TOKEN: status.HTTP_400_BAD_REQUEST,
    ErrorKind.FORM_INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorKind.QUERY_INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorKind.HEADER_INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorKind.BODY_TOO_LARGE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.ENCODING_INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorKind.PAYLOAD_INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorKind.MODE_MISMATCH: status.HTTP_400_BAD_REQUEST,
    ErrorKind.TOKEN_MISMATCH: status.HTTP_400_BAD_REQUEST,
    ErrorKind.ALGORITHM_UNSUPPORTED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.SIGNATURE_MISMATCH: status.HTTP_500_INTERNAL_SERVER_ERROR,
    # Decoded only after the signature matched, so the platform sent it
    ErrorKind.PAYLOAD_DECODE_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.SECRET_UNRESOLVED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.CALLBACK_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ResponseMapper:
    """Turn dispatch outcomes into status code and body.

    Args:
        auth_failure_status: Status for signature mismatch and unsupported
            algorithm. Defaults to 500, the platform reference behavior.
    """

    def __init__(self, auth_failure_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        self.auth_failure_status = auth_failure_status

    def status_for(self, kind: ErrorKind) -> int:
        if kind in AUTH_FAILURE_KINDS:
            return self.auth_failure_status
        return STATUS_BY_KIND[kind]

    def failure(self, error: CallbackProtocolError) -> PassBackResponse:
        if error.kind is ErrorKind.CALLBACK_FAILED and error.cause is not None:
            # The callback's own message, verbatim
            body = str(error.cause)
        else:
            body = str(error)
        return PassBackResponse(status_code=self.status_for(error.kind), body=body)

    def success(self, body: str = "") -> PassBackResponse:
        return PassBackResponse(status_code=status.HTTP_200_OK, body=body)
