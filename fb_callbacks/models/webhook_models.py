"""Webhook envelope, verification query and dispatch result models."""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from fb_callbacks.models.fields import PlatformId, UnixTimestamp
from fb_callbacks.models.webhook_topics import InstagramChange, PermissionsChange


class InstagramEntry(BaseModel):
    """Instagram topic entry; `id` is the IG User id."""

    model_config = ConfigDict(frozen=True)

    id: PlatformId
    time: UnixTimestamp
    changes: list[InstagramChange]

    @property
    def is_test(self) -> bool:
        """Events sent from the dashboard "Test" button carry id 0."""
        return self.id == 0


class PermissionsEntry(BaseModel):
    """Permissions topic entry; `id` and `uid` are the business integration user."""

    model_config = ConfigDict(frozen=True)

    id: PlatformId
    uid: PlatformId
    time: UnixTimestamp
    changes: list[PermissionsChange]

    @property
    def is_test(self) -> bool:
        return self.id == 0


class InstagramPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    object: Literal["instagram"]
    entry: list[InstagramEntry]

    @property
    def entries(self) -> list[InstagramEntry]:
        return self.entry


class PermissionsPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    object: Literal["permissions"]
    entry: list[PermissionsEntry]

    @property
    def entries(self) -> list[PermissionsEntry]:
        return self.entry


WebhookPayload = Annotated[
    InstagramPayload | PermissionsPayload,
    Field(discriminator="object"),
]


class HandshakeQuery(BaseModel):
    """Subscription verification request query (`hub.*` parameters)."""

    model_config = ConfigDict(frozen=True)

    mode: str = Field(alias="hub.mode")
    challenge: int = Field(alias="hub.challenge", ge=-(2**63), le=2**63 - 1)
    verify_token: str = Field(alias="hub.verify_token")


class CallbackContext(BaseModel):
    """Request context handed to integrator callbacks alongside the payload."""

    model_config = ConfigDict(frozen=True)

    app_id: int
    correlation_id: str | None = None


class PassBackResponse(BaseModel):
    """Status and body the HTTP boundary sends back to the platform."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    body: str = ""
