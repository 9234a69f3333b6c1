"""Write activity posts as a side effect of other user actions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable, cast

from firebase_admin import firestore

from woodpecker.core.constants import (
    FIRESTORE_BATCH_LIMIT,
    GROUPS_COLLECTION,
    POST_DETAILS,
    POST_GROUP_ID,
    POST_LIKE_COUNT,
    POST_LIKED_BY,
    POST_PIN_ID,
    POST_TIMESTAMP,
    POST_USER_ID,
    POSTS_COLLECTION,
    UNKNOWN_GROUP_NAME,
)

from .models import EventType, PostDetails

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.batch import WriteBatch
    from google.cloud.firestore_v1.client import Client

logger = logging.getLogger(__name__)


class PostEmitter:
    """Service class for creating feed posts."""

    @staticmethod
    def build_post(  # noqa: PLR0913
        event_type: EventType,
        user_id: str,
        user_name: str,
        group_id: str,
        group_name: str,
        place_name: str = "",
        pin_id: str = "",
        review_summary: str = "",
    ) -> dict[str, Any]:
        """Return a new post document with no likes."""
        details = PostDetails(
            group_name=group_name,
            place_name=place_name,
            review_summary=review_summary,
            user_name=user_name,
            event_type=event_type.value,
        )
        return {
            POST_DETAILS: details.to_dict(),
            POST_GROUP_ID: group_id,
            POST_LIKE_COUNT: 0,
            POST_LIKED_BY: [],
            POST_PIN_ID: pin_id,
            POST_TIMESTAMP: firestore.SERVER_TIMESTAMP,
            POST_USER_ID: user_id,
        }

    @staticmethod
    def emit(
        db: Client,
        post_data: dict[str, Any],
        batch: WriteBatch | None = None,
    ) -> str:
        """Write a post and return its id.

        With a batch the write is only queued; the caller commits.
        """
        post_ref = db.collection(POSTS_COLLECTION).document()
        if batch is not None:
            batch.set(post_ref, post_data)
        else:
            post_ref.set(post_data)
            logger.info(
                f"Post {post_ref.id} created for event "
                f"{post_data[POST_DETAILS]['eventType']}"
            )
        return post_ref.id

    @staticmethod
    def get_group_names(db: Client, group_ids: Iterable[str]) -> dict[str, str]:
        """Batch-fetch group names, keyed by group id."""
        refs = [db.collection(GROUPS_COLLECTION).document(gid) for gid in group_ids]
        if not refs:
            return {}
        docs = cast(list["DocumentSnapshot"], db.get_all(refs))
        names = {}
        for doc in docs:
            if doc.exists:
                data = doc.to_dict() or {}
                names[doc.id] = data.get("name") or UNKNOWN_GROUP_NAME
        return names

    @staticmethod
    def emit_for_groups(  # noqa: PLR0913
        db: Client,
        event_type: EventType,
        user_id: str,
        user_name: str,
        group_ids: Iterable[str],
        place_name: str = "",
        pin_id: str = "",
        review_summary: str = "",
    ) -> list[str]:
        """Write one post per group and return the new post ids."""
        group_ids = list(dict.fromkeys(gid for gid in group_ids if gid))
        if not group_ids:
            return []

        group_names = PostEmitter.get_group_names(db, group_ids)

        post_ids = []
        batch = db.batch()
        pending = 0
        for group_id in group_ids:
            post_data = PostEmitter.build_post(
                event_type,
                user_id=user_id,
                user_name=user_name,
                group_id=group_id,
                group_name=group_names.get(group_id, UNKNOWN_GROUP_NAME),
                place_name=place_name,
                pin_id=pin_id,
                review_summary=review_summary,
            )
            post_ids.append(PostEmitter.emit(db, post_data, batch=batch))
            pending += 1
            if pending >= FIRESTORE_BATCH_LIMIT:
                batch.commit()
                batch = db.batch()
                pending = 0

        if pending:
            batch.commit()

        logger.info(
            f"Created {len(post_ids)} {event_type.value} post(s) for user {user_id}"
        )
        return post_ids
