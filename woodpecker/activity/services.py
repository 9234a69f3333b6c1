"""One-shot reads of the posts collection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from firebase_admin import firestore

from woodpecker.core.constants import POST_TIMESTAMP, POSTS_COLLECTION

from .feed import decode_posts
from .models import Post, PostDecodeError

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client


class ActivityService:
    """Service class for reading posts outside the live feed."""

    @staticmethod
    def get_posts(db: Client, limit: int | None = None) -> tuple[Post, ...]:
        """Fetch posts newest first, dropping documents that do not decode."""
        query = db.collection(POSTS_COLLECTION).order_by(
            POST_TIMESTAMP, direction=firestore.Query.DESCENDING
        )
        if limit:
            query = query.limit(limit)
        return decode_posts(query.stream())

    @staticmethod
    def get_post(db: Client, post_id: str) -> Post | None:
        """Fetch a single post, or None if it is missing or malformed."""
        doc = db.collection(POSTS_COLLECTION).document(post_id).get()
        if not doc.exists:
            return None
        try:
            return Post.from_snapshot(doc)
        except PostDecodeError:
            return None
