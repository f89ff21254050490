"""Webhook topic change models.

Each topic delivers a list of changes tagged by their `field` name. Both
unions are closed: an unknown `field` fails validation.
"""

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from fb_callbacks.models.fields import PlatformId
from fb_callbacks.models.permissions import Permission, parse_permission

# =============================================================================
# Instagram topic
# =============================================================================


class CommentsValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: PlatformId
    text: str
    # Always null for the dashboard "Test" button events
    media: dict[str, Any] | None = None


class MentionsValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    media_id: PlatformId
    comment_id: PlatformId


class StoryInsightsMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    impressions: int
    reach: int
    taps_forward: int
    taps_back: int
    exits: int
    replies: int


class StoryInsightsValue(BaseModel):
    """Story metrics arrive flat next to `media_id`; they are grouped here."""

    model_config = ConfigDict(frozen=True)

    media_id: PlatformId
    metrics: StoryInsightsMetrics

    @model_validator(mode="before")
    @classmethod
    def _group_metrics(cls, data: Any) -> Any:
        if isinstance(data, dict) and "metrics" not in data:
            metric_names = StoryInsightsMetrics.model_fields.keys()
            data = {
                "media_id": data.get("media_id"),
                "metrics": {k: v for k, v in data.items() if k in metric_names},
            }
        return data


class CommentsChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: Literal["comments"]
    value: CommentsValue


class MentionsChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: Literal["mentions"]
    value: MentionsValue


class StoryInsightsChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: Literal["story_insights"]
    value: StoryInsightsValue


InstagramChange = Annotated[
    CommentsChange | MentionsChange | StoryInsightsChange,
    Field(discriminator="field"),
]

# =============================================================================
# Permissions topic
# =============================================================================


class Verb(StrEnum):
    GRANTED = "granted"
    REVOKED = "revoked"


class PermissionChangeValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    verb: Verb
    target_ids: list[PlatformId] | None = None


class ConnectedChange(BaseModel):
    """App connection change; `verb` and `target_ids` sit next to `field`."""

    model_config = ConfigDict(frozen=True)

    field: Literal["connected"]
    verb: Verb
    target_ids: list[PlatformId] | None = None

    @property
    def value(self) -> PermissionChangeValue:
        return PermissionChangeValue(verb=self.verb, target_ids=self.target_ids)

    @property
    def permission(self) -> None:
        """The app connection itself, not a single permission."""
        return None


class PermissionFieldChange(BaseModel):
    """Grant or revocation of a single permission."""

    model_config = ConfigDict(frozen=True)

    field: Literal[
        "instagram_basic",
        "instagram_manage_comments",
        "instagram_manage_insights",
        "instagram_content_publish",
        "pages_show_list",
        "pages_manage_metadata",
    ]
    value: PermissionChangeValue

    @property
    def permission(self) -> Permission:
        return parse_permission(self.field)


PermissionsChange = Annotated[
    ConnectedChange | PermissionFieldChange,
    Field(discriminator="field"),
]
