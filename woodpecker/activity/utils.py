"""Presentation helpers for feed posts."""

from __future__ import annotations

import datetime
from typing import Any

from woodpecker.core.constants import (
    DEFAULT_IMAGE_URL,
    GROUP_JOINED_IMAGE_URL,
    PIN_CREATED_IMAGE_URL,
    REVIEW_ADDED_IMAGE_URL,
)

from .models import EventType, Post

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600

_IMAGE_URLS = {
    EventType.PIN_CREATED: PIN_CREATED_IMAGE_URL,
    EventType.REVIEW_ADDED: REVIEW_ADDED_IMAGE_URL,
    EventType.GROUP_JOINED: GROUP_JOINED_IMAGE_URL,
}


def _now_for(timestamp: datetime.datetime) -> datetime.datetime:
    if timestamp.tzinfo is not None:
        return datetime.datetime.now(datetime.timezone.utc)
    return datetime.datetime.now()


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def time_ago(
    timestamp: datetime.datetime, now: datetime.datetime | None = None
) -> str:
    """Format the age of a timestamp in seconds, minutes or hours."""
    now = now or _now_for(timestamp)
    interval = max((now - timestamp).total_seconds(), 0)
    if interval < SECONDS_PER_MINUTE:
        return _plural(int(interval), "second")
    if interval < SECONDS_PER_HOUR:
        return _plural(int(interval // SECONDS_PER_MINUTE), "minute")
    return _plural(int(interval // SECONDS_PER_HOUR), "hour")


def describe_post(post: Post, now: datetime.datetime | None = None) -> str:
    """Return the one-line feed sentence for a post."""
    details = post.details
    ago = time_ago(post.timestamp, now)
    kind = details.kind
    if kind is EventType.PIN_CREATED:
        return (
            f"{details.user_name} ({details.group_name}) created a new pin at "
            f"{details.place_name} {ago}."
        )
    if kind is EventType.REVIEW_ADDED:
        return (
            f"{details.user_name} ({details.group_name}) added a new review to "
            f"{details.place_name} {ago}."
        )
    if kind is EventType.GROUP_JOINED:
        return f"{details.user_name} joined ({details.group_name}) {ago}."
    return f"{details.user_name} ({details.group_name}) performed an action {ago}."


def image_url_for(event_type: str) -> str:
    """Return the feed illustration for an event type."""
    return _IMAGE_URLS.get(EventType.parse(event_type), DEFAULT_IMAGE_URL)


def serialize_post(
    post: Post, viewer_id: str | None, now: datetime.datetime | None = None
) -> dict[str, Any]:
    """Return a JSON-ready representation of a post for the given viewer."""
    details = post.details
    return {
        "id": post.id,
        "group_id": post.group_id,
        "pin_id": post.pin_id,
        "user_id": post.user_id,
        "timestamp": post.timestamp.isoformat(),
        "like_count": post.like_count,
        "liked": post.is_liked_by(viewer_id),
        "event_type": details.kind.value,
        "details": {
            "group_name": details.group_name,
            "place_name": details.place_name,
            "review_summary": details.review_summary,
            "user_name": details.user_name,
        },
        "description": describe_post(post, now),
        "time_ago": time_ago(post.timestamp, now),
        "image_url": image_url_for(details.event_type),
    }
