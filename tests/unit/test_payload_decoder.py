"""Tests for webhook payload decoding."""

import json

import pytest
from hypothesis import given, strategies as st

from fb_callbacks.models.permissions import (
    FacebookPermission,
    OtherPermission,
    parse_permission,
)
from fb_callbacks.models.webhook_models import InstagramPayload, PermissionsPayload
from fb_callbacks.models.webhook_topics import (
    CommentsChange,
    ConnectedChange,
    MentionsChange,
    PermissionFieldChange,
    StoryInsightsChange,
    Verb,
)
from fb_callbacks.services.errors import CallbackProtocolError, ErrorKind
from fb_callbacks.services.payload_decoder import (
    decode_permission,
    decode_webhook_payload,
)


def _instagram(*changes: dict, entry_id="17841400000000000") -> bytes:
    return json.dumps(
        {
            "object": "instagram",
            "entry": [{"id": entry_id, "time": 1624005617, "changes": list(changes)}],
        }
    ).encode()


def _decode_kind(body: bytes) -> ErrorKind:
    with pytest.raises(CallbackProtocolError) as exc_info:
        decode_webhook_payload(body)
    return exc_info.value.kind


class TestInstagramTopic:
    """Test decoding of the instagram object."""

    def test_story_insights_event(self, instagram_body):
        payload = decode_webhook_payload(instagram_body)

        assert isinstance(payload, InstagramPayload)
        assert len(payload.entries) == 1
        entry = payload.entries[0]
        assert entry.id == 0
        assert entry.is_test
        assert entry.time.timestamp() == 1624005617
        assert len(entry.changes) == 1

        change = entry.changes[0]
        assert isinstance(change, StoryInsightsChange)
        assert change.value.media_id == 17887498072083520
        assert change.value.metrics.impressions == 444
        assert change.value.metrics.replies == 0

    def test_comments_change(self):
        payload = decode_webhook_payload(
            _instagram(
                {
                    "field": "comments",
                    "value": {"id": "17865799348089039", "text": "This is an example."},
                }
            )
        )
        change = payload.entries[0].changes[0]

        assert isinstance(change, CommentsChange)
        assert change.value.id == 17865799348089039
        assert change.value.text == "This is an example."
        assert change.value.media is None
        assert not payload.entries[0].is_test

    def test_mentions_change(self):
        payload = decode_webhook_payload(
            _instagram(
                {"field": "mentions", "value": {"media_id": 17918195224117851, "comment_id": "17894227972186120"}}
            )
        )
        change = payload.entries[0].changes[0]

        assert isinstance(change, MentionsChange)
        assert change.value.media_id == 17918195224117851
        assert change.value.comment_id == 17894227972186120

    def test_unknown_field_fails(self):
        body = _instagram({"field": "live_comments", "value": {}})
        assert _decode_kind(body) is ErrorKind.PAYLOAD_DECODE_FAILED

    def test_entry_id_string_and_number_equal(self):
        as_string = decode_webhook_payload(_instagram(entry_id="0"))
        as_number = decode_webhook_payload(_instagram(entry_id=0))
        assert as_string.entries[0].id == as_number.entries[0].id == 0

    @pytest.mark.parametrize("entry_id", ["-1", "1.5", "abc", "", True, 1.5, 2**64])
    def test_invalid_entry_id_fails(self, entry_id):
        assert _decode_kind(_instagram(entry_id=entry_id)) is ErrorKind.PAYLOAD_DECODE_FAILED

    @pytest.mark.parametrize("time", [10**20, -(10**20)])
    def test_entry_time_out_of_range_fails(self, time: int):
        body = json.dumps(
            {"object": "instagram", "entry": [{"id": "1", "time": time, "changes": []}]}
        ).encode()
        assert _decode_kind(body) is ErrorKind.PAYLOAD_DECODE_FAILED


class TestPermissionsTopic:
    """Test decoding of the permissions object."""

    def test_instagram_basic_granted(self, permissions_body):
        payload = decode_webhook_payload(permissions_body)

        assert isinstance(payload, PermissionsPayload)
        entry = payload.entries[0]
        assert entry.id == 0
        assert entry.uid == 0
        assert entry.is_test

        change = entry.changes[0]
        assert isinstance(change, PermissionFieldChange)
        assert change.permission is FacebookPermission.INSTAGRAM_BASIC
        assert change.value.verb is Verb.GRANTED
        assert change.value.target_ids == [123123123123123, 321321321321321]

    def test_connected_change_is_flat(self):
        body = json.dumps(
            {
                "object": "permissions",
                "entry": [
                    {
                        "id": "1",
                        "uid": 1,
                        "time": 1624610156,
                        "changes": [{"field": "connected", "verb": "revoked"}],
                    }
                ],
            }
        ).encode()
        change = decode_webhook_payload(body).entries[0].changes[0]

        assert isinstance(change, ConnectedChange)
        assert change.value.verb is Verb.REVOKED
        assert change.value.target_ids is None
        assert change.permission is None

    def test_unknown_verb_fails(self, permissions_event):
        permissions_event["entry"][0]["changes"][0]["value"]["verb"] = "paused"
        body = json.dumps(permissions_event).encode()
        assert _decode_kind(body) is ErrorKind.PAYLOAD_DECODE_FAILED

    def test_unknown_permission_field_fails(self, permissions_event):
        permissions_event["entry"][0]["changes"][0]["field"] = "ads_read"
        body = json.dumps(permissions_event).encode()
        assert _decode_kind(body) is ErrorKind.PAYLOAD_DECODE_FAILED

    @pytest.mark.parametrize("field", ["pages_show_list", "instagram_manage_insights"])
    def test_permission_goes_through_open_type(self, permissions_event, field: str):
        permissions_event["entry"][0]["changes"][0]["field"] = field
        change = decode_webhook_payload(json.dumps(permissions_event).encode()).entries[0].changes[0]

        assert change.permission == decode_permission(field)
        assert isinstance(change.permission, FacebookPermission)


class TestEnvelope:
    """Test the object discriminator and malformed bodies."""

    @pytest.mark.parametrize(
        "body",
        [
            b'{"object": "page", "entry": []}',
            b'{"entry": []}',
            b'{"object": "instagram"}',
            b"not json",
            b"",
            b"[]",
        ],
    )
    def test_invalid_envelope_fails(self, body: bytes):
        assert _decode_kind(body) is ErrorKind.PAYLOAD_DECODE_FAILED

    def test_empty_entry_list(self):
        assert decode_webhook_payload(b'{"object": "instagram", "entry": []}').entries == []


class TestPermissionNames:
    """Test the open permission name type."""

    def test_known_permission(self):
        assert decode_permission("pages_manage_metadata") is FacebookPermission.PAGES_MANAGE_METADATA

    def test_unknown_permission_is_caught(self):
        permission = decode_permission("whatsapp_business_messaging")

        assert permission == OtherPermission(name="whatsapp_business_messaging")
        assert str(permission) == "whatsapp_business_messaging"

    @pytest.mark.parametrize("permission", list(FacebookPermission))
    def test_every_known_name_decodes(self, permission: FacebookPermission):
        assert decode_permission(permission.value) is permission

    @given(name=st.text(alphabet="abcdefghijklmnopqrstuvwxyz_", min_size=1, max_size=40))
    def test_any_name_decodes(self, name: str):
        """Property: permission names never fail to decode."""
        decoded = decode_permission(name)
        assert str(decoded) == name

    def test_parse_permission_unknown_name(self):
        assert parse_permission("threads_basic") == OtherPermission(name="threads_basic")
        assert parse_permission("user_posts") is FacebookPermission.USER_POSTS
