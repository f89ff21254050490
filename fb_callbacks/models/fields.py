"""Shared field types for platform payloads.

The platform sends numeric ids as JSON strings on some endpoints and as
JSON numbers on others, so ids accept both. Timestamps are Unix seconds.
"""

from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from fb_callbacks.constants import U64_MAX


def _id_from_string_or_number(value: Any) -> Any:
    """Turn a decimal string into an int; leave numbers to the int validator."""
    if isinstance(value, bool):
        raise ValueError("id must be a string or a number, not a boolean")
    if isinstance(value, str):
        if not (value.isascii() and value.isdigit()):
            raise ValueError(f"id {value!r} is not a decimal number")
        return int(value)
    return value


def _datetime_from_unix_seconds(value: Any) -> Any:
    # Plain datetime validation would read large values as milliseconds
    if isinstance(value, bool):
        raise ValueError("timestamp must be a number, not a boolean")
    if isinstance(value, int):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise ValueError(f"timestamp {value} is out of range") from e
    return value


PlatformId = Annotated[
    int,
    BeforeValidator(_id_from_string_or_number),
    Field(ge=0, le=U64_MAX, strict=True),
]

UnixTimestamp = Annotated[datetime, BeforeValidator(_datetime_from_unix_seconds)]
