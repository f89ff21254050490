"""Facebook Login permission names.

`FacebookPermission` lists the permissions known today. The platform adds
new ones over time, so `Permission` is open: a name outside the enum
becomes an `OtherPermission` instead of a validation error.
"""

from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, TypeAdapter


class FacebookPermission(StrEnum):
    ADS_MANAGEMENT = "ads_management"
    ADS_READ = "ads_read"
    ATTRIBUTION_READ = "attribution_read"
    BUSINESS_MANAGEMENT = "business_management"
    CATALOG_MANAGEMENT = "catalog_management"
    EMAIL = "email"
    GROUPS_ACCESS_MEMBER_INFO = "groups_access_member_info"
    INSTAGRAM_BASIC = "instagram_basic"
    INSTAGRAM_CONTENT_PUBLISH = "instagram_content_publish"
    INSTAGRAM_MANAGE_COMMENTS = "instagram_manage_comments"
    INSTAGRAM_MANAGE_INSIGHTS = "instagram_manage_insights"
    LEADS_RETRIEVAL = "leads_retrieval"
    PAGES_EVENTS = "pages_events"
    PAGES_MANAGE_ADS = "pages_manage_ads"
    PAGES_MANAGE_CTA = "pages_manage_cta"
    PAGES_MANAGE_INSTANT_ARTICLES = "pages_manage_instant_articles"
    PAGES_MANAGE_ENGAGEMENT = "pages_manage_engagement"
    PAGES_MANAGE_METADATA = "pages_manage_metadata"
    PAGES_MANAGE_POSTS = "pages_manage_posts"
    PAGES_MESSAGING = "pages_messaging"
    PAGES_READ_ENGAGEMENT = "pages_read_engagement"
    PAGES_READ_USER_CONTENT = "pages_read_user_content"
    PAGES_SHOW_LIST = "pages_show_list"
    PAGES_USER_GENDER = "pages_user_gender"
    PAGES_USER_LOCALE = "pages_user_locale"
    PAGES_USER_TIMEZONE = "pages_user_timezone"
    PUBLIC_PROFILE = "public_profile"
    PUBLISH_TO_GROUPS = "publish_to_groups"
    PUBLISH_VIDEO = "publish_video"
    READ_INSIGHTS = "read_insights"
    USER_AGE_RANGE = "user_age_range"
    USER_BIRTHDAY = "user_birthday"
    USER_FRIENDS = "user_friends"
    USER_GENDER = "user_gender"
    USER_HOMETOWN = "user_hometown"
    USER_LIKES = "user_likes"
    USER_LINK = "user_link"
    USER_LOCATION = "user_location"
    USER_MESSENGER_CONTACT = "user_messenger_contact"
    USER_PHOTOS = "user_photos"
    USER_POSTS = "user_posts"
    USER_VIDEOS = "user_videos"


class OtherPermission(BaseModel):
    """A permission name not (yet) listed in FacebookPermission."""

    model_config = ConfigDict(frozen=True)

    name: str

    def __str__(self) -> str:
        return self.name


_KNOWN_PERMISSIONS = frozenset(p.value for p in FacebookPermission)


def _wrap_unknown_permission(value: Any) -> Any:
    if isinstance(value, str) and value not in _KNOWN_PERMISSIONS:
        return OtherPermission(name=value)
    return value


Permission = Annotated[
    FacebookPermission | OtherPermission,
    BeforeValidator(_wrap_unknown_permission),
]

_permission_adapter: TypeAdapter[Permission] = TypeAdapter(Permission)


def parse_permission(name: str) -> Permission:
    """Map a permission name; names not known yet become OtherPermission."""
    return _permission_adapter.validate_python(name)
