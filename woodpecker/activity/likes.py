"""Service layer for liking and unliking posts."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from firebase_admin import firestore

from woodpecker.core.constants import POST_LIKE_COUNT, POST_LIKED_BY, POSTS_COLLECTION
from woodpecker.errors import NotFoundError

from .models import Post

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client
    from google.cloud.firestore_v1.document import DocumentReference
    from google.cloud.firestore_v1.transaction import Transaction

logger = logging.getLogger(__name__)


class LikeService:
    """Service class for like toggling on posts."""

    @staticmethod
    def build_like_mutation(post: Post, user_id: str) -> dict[str, Any]:
        """Return the field operations that flip user_id's like on post.

        The direction comes from the caller's copy of ``post.liked_by``. The
        count delta and the membership change always travel together.
        """
        if post.is_liked_by(user_id):
            return {
                POST_LIKE_COUNT: firestore.Increment(-1),
                POST_LIKED_BY: firestore.ArrayRemove([user_id]),
            }
        return {
            POST_LIKE_COUNT: firestore.Increment(1),
            POST_LIKED_BY: firestore.ArrayUnion([user_id]),
        }

    @staticmethod
    def toggle_like(db: Client, post: Post, user_id: str | None) -> bool:
        """Toggle the user's like with a single conditional update.

        Returns False without touching the backend when there is no user or
        the post has no id. Backend failures are logged, never raised; the
        feed keeps showing the pre-toggle state until the next snapshot.
        """
        if not user_id or not post.id:
            return False

        post_ref = db.collection(POSTS_COLLECTION).document(post.id)
        liking = not post.is_liked_by(user_id)
        try:
            post_ref.update(LikeService.build_like_mutation(post, user_id))
        except Exception as e:
            action = "liking" if liking else "unliking"
            logger.error(f"Error {action} post {post.id} for user {user_id}: {e}")
            return False

        logger.info(f"Post {post.id} {'liked' if liking else 'unliked'} by {user_id}")
        return True

    @staticmethod
    def _toggle_like_in_transaction(
        transaction: Transaction, post_ref: DocumentReference, user_id: str
    ) -> bool:
        """Read the post inside the transaction and flip the like.

        Returns the new liked state.
        """
        snapshot = post_ref.get(transaction=transaction)
        if not snapshot.exists:
            raise NotFoundError("Post not found.")

        data = snapshot.to_dict() or {}
        liked_by = list(data.get(POST_LIKED_BY) or [])
        if user_id in liked_by:
            transaction.update(
                post_ref,
                {
                    POST_LIKE_COUNT: firestore.Increment(-1),
                    POST_LIKED_BY: firestore.ArrayRemove([user_id]),
                },
            )
            return False

        transaction.update(
            post_ref,
            {
                POST_LIKE_COUNT: firestore.Increment(1),
                POST_LIKED_BY: firestore.ArrayUnion([user_id]),
            },
        )
        return True

    @staticmethod
    def toggle_like_transactional(
        db: Client, post_id: str | None, user_id: str | None
    ) -> bool | None:
        """Toggle the like from a fresh read inside a Firestore transaction.

        Rapid repeated toggles serialize on the document, so the count and the
        membership set cannot drift apart. Returns the new liked state, or
        None when preconditions fail or the backend rejects the write. A
        missing post raises NotFoundError.
        """
        if not user_id or not post_id:
            return None

        post_ref = db.collection(POSTS_COLLECTION).document(post_id)
        try:
            transaction = db.transaction()
            toggle = firestore.transactional(LikeService._toggle_like_in_transaction)
            return toggle(transaction, post_ref, user_id)
        except NotFoundError:
            raise
        except Exception as e:
            logger.error(f"Error toggling like on post {post_id} for {user_id}: {e}")
            return None
