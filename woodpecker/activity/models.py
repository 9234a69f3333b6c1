"""Data models for the activity feed."""

from __future__ import annotations

import datetime
import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping

from woodpecker.core.constants import (
    DETAILS_EVENT_TYPE,
    DETAILS_GROUP_NAME,
    DETAILS_PLACE_NAME,
    DETAILS_REVIEW_SUMMARY,
    DETAILS_USER_NAME,
    POST_DETAILS,
    POST_GROUP_ID,
    POST_LIKE_COUNT,
    POST_LIKED_BY,
    POST_PIN_ID,
    POST_TIMESTAMP,
    POST_USER_ID,
)

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot


class PostDecodeError(ValueError):
    """Raised when a Firestore document does not match the post schema."""


class EventType(str, enum.Enum):
    """The domain event a post describes."""

    PIN_CREATED = "pin_created"
    REVIEW_ADDED = "review_added"
    GROUP_JOINED = "group_joined"
    DEFAULT = "default"

    @classmethod
    def parse(cls, raw: str) -> EventType:
        """Map a stored tag to an event type, falling back to DEFAULT."""
        try:
            return cls(raw.lower())
        except ValueError:
            return cls.DEFAULT


def _require_str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise PostDecodeError(f"Field '{key}' must be a string, got {value!r}")
    return value


@dataclass(frozen=True)
class PostDetails:
    """Denormalized display payload embedded in a post."""

    group_name: str
    place_name: str
    review_summary: str
    user_name: str
    event_type: str

    @property
    def kind(self) -> EventType:
        """Return the parsed event type."""
        return EventType.parse(self.event_type)

    @classmethod
    def from_dict(cls, data: Any) -> PostDetails:
        """Decode the embedded details map."""
        if not isinstance(data, Mapping):
            raise PostDecodeError(f"Field '{POST_DETAILS}' must be a map")
        return cls(
            group_name=_require_str(data, DETAILS_GROUP_NAME),
            place_name=_require_str(data, DETAILS_PLACE_NAME),
            review_summary=_require_str(data, DETAILS_REVIEW_SUMMARY),
            user_name=_require_str(data, DETAILS_USER_NAME),
            event_type=_require_str(data, DETAILS_EVENT_TYPE),
        )

    def to_dict(self) -> dict[str, str]:
        """Return the Firestore representation."""
        return {
            DETAILS_GROUP_NAME: self.group_name,
            DETAILS_PLACE_NAME: self.place_name,
            DETAILS_REVIEW_SUMMARY: self.review_summary,
            DETAILS_USER_NAME: self.user_name,
            DETAILS_EVENT_TYPE: self.event_type,
        }


@dataclass(frozen=True)
class Post:
    """An activity feed record describing one domain event.

    Only ``like_count`` and ``liked_by`` change after creation, and they
    always change together.
    """

    id: str | None
    details: PostDetails
    group_id: str
    like_count: int
    liked_by: tuple[str, ...] = field(default_factory=tuple)
    pin_id: str = ""
    timestamp: datetime.datetime = datetime.datetime.min
    user_id: str = ""

    def is_liked_by(self, user_id: str | None) -> bool:
        """Return True if the given user appears in liked_by."""
        return bool(user_id) and user_id in self.liked_by

    @classmethod
    def from_dict(cls, data: Any, post_id: str | None = None) -> Post:
        """Decode a post document.

        Raises:
            PostDecodeError: If any field is missing or has the wrong type.
        """
        if not isinstance(data, Mapping):
            raise PostDecodeError("Post document is empty or not a map")

        like_count = data.get(POST_LIKE_COUNT)
        if isinstance(like_count, bool) or not isinstance(like_count, int):
            raise PostDecodeError(
                f"Field '{POST_LIKE_COUNT}' must be an integer, got {like_count!r}"
            )
        if like_count < 0:
            raise PostDecodeError(f"Field '{POST_LIKE_COUNT}' is negative")

        raw_liked_by = data.get(POST_LIKED_BY)
        if not isinstance(raw_liked_by, list) or not all(
            isinstance(uid, str) for uid in raw_liked_by
        ):
            raise PostDecodeError(f"Field '{POST_LIKED_BY}' must be a list of strings")

        timestamp = data.get(POST_TIMESTAMP)
        if not isinstance(timestamp, datetime.datetime):
            raise PostDecodeError(
                f"Field '{POST_TIMESTAMP}' must be a timestamp, got {timestamp!r}"
            )

        return cls(
            id=post_id,
            details=PostDetails.from_dict(data.get(POST_DETAILS)),
            group_id=_require_str(data, POST_GROUP_ID),
            like_count=like_count,
            # dict.fromkeys keeps first occurrences in order
            liked_by=tuple(dict.fromkeys(raw_liked_by)),
            pin_id=_require_str(data, POST_PIN_ID),
            timestamp=timestamp,
            user_id=_require_str(data, POST_USER_ID),
        )

    @classmethod
    def from_snapshot(cls, doc: DocumentSnapshot) -> Post:
        """Decode a Firestore document snapshot."""
        return cls.from_dict(doc.to_dict(), post_id=doc.id)

    def to_dict(self) -> dict[str, Any]:
        """Return the Firestore representation, without the document id."""
        return {
            POST_DETAILS: self.details.to_dict(),
            POST_GROUP_ID: self.group_id,
            POST_LIKE_COUNT: self.like_count,
            POST_LIKED_BY: list(self.liked_by),
            POST_PIN_ID: self.pin_id,
            POST_TIMESTAMP: self.timestamp,
            POST_USER_ID: self.user_id,
        }


@dataclass(frozen=True)
class FeedState:
    """A snapshot of the ordered feed and its last fetch error."""

    posts: tuple[Post, ...] = ()
    error_message: str = ""
