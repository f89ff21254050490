"""Application-wide constants.

This module centralizes the protocol constants shared by the login
deauthorization callback and the webhooks endpoints, so the wire contract
lives in one place.
"""

# =============================================================================
# Signed Request (login deauthorization callback)
# =============================================================================

# Form field carrying the signed request in the deauthorization POST
SIGNED_REQUEST_FORM_KEY = "signed_request"

# Algorithm assumed when a signed request payload does not name one
DEFAULT_SIGNED_REQUEST_ALGORITHM = "HMAC-SHA256"

# =============================================================================
# Webhooks (event notifications and verification requests)
# =============================================================================

# Header carrying the detached body signature
SIGNATURE_HEADER_NAME = "X-Hub-Signature"

# Supported header algorithms mapped to their hex digest length
SIGNATURE_HEX_LENGTHS = {
    "sha1": 40,
}

# Only mode accepted during subscription verification
SUBSCRIBE_MODE = "subscribe"

# =============================================================================
# HTTP Boundary
# =============================================================================

# Maximum accepted request body size (bytes)
MAX_BODY_BYTES = 32 * 1024

DEFAULT_DEAUTH_PATH_PREFIX = "fb_login_deauth_callback"
DEFAULT_WEBHOOK_PATH_PREFIX = "fb_webhooks"

# Statuses the signature/algorithm failure policy may be set to
AUTH_FAILURE_STATUS_CHOICES = (400, 401, 403, 500)

# Largest value a platform id may take (unsigned 64-bit)
U64_MAX = 2**64 - 1

# Length of verify tokens generated by the CLI
VERIFY_TOKEN_LENGTH = 32
