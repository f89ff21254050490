"""Signed request payload models."""

from pydantic import BaseModel, ConfigDict

from fb_callbacks.constants import DEFAULT_SIGNED_REQUEST_ALGORITHM
from fb_callbacks.models.fields import PlatformId, UnixTimestamp


class DeauthPayload(BaseModel):
    """Payload of the login deauthorization callback signed request."""

    model_config = ConfigDict(frozen=True)

    user_id: PlatformId
    algorithm: str = DEFAULT_SIGNED_REQUEST_ALGORITHM
    issued_at: UnixTimestamp
