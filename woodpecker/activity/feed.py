"""Live, timestamp-descending view of the posts collection."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, Iterable

from firebase_admin import firestore

from woodpecker.core.constants import POST_TIMESTAMP, POSTS_COLLECTION

from .dispatch import SerialDispatcher
from .models import FeedState, Post, PostDecodeError

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client

logger = logging.getLogger(__name__)

FeedListener = Callable[[FeedState], None]


class SubscriptionClosedError(RuntimeError):
    """Raised when a live subscription stops without being cancelled."""

    def __init__(self, collection: str) -> None:
        super().__init__(f"the {collection} subscription was closed")


def decode_posts(docs: Iterable[DocumentSnapshot]) -> tuple[Post, ...]:
    """Decode documents in order, dropping any that do not parse."""
    posts = []
    for doc in docs:
        try:
            posts.append(Post.from_snapshot(doc))
        except PostDecodeError as e:
            logger.debug(f"Dropping post {doc.id}: {e}")
    return tuple(posts)


class FeedSynchronizer:
    """Keep an in-memory ordered feed in step with Firestore.

    Every snapshot replaces the whole feed; nothing is merged. Fetch errors
    are recorded in ``error_message`` and leave the last good feed in place.
    All state changes run on the dispatcher's execution context.

    Usage:
    with FeedSynchronizer(db) as feed:
        feed.add_listener(render)
        ...
    """

    def __init__(self, db: Client, dispatcher: Any = None) -> None:
        """Initialize the synchronizer with an empty feed."""
        self._db = db
        self._dispatcher = dispatcher or SerialDispatcher()
        self._state = FeedState()
        self._listeners: list[FeedListener] = []
        self._watch: Any = None
        self._generation = 0
        self._lock = threading.Lock()

    def __enter__(self) -> FeedSynchronizer:
        self.start()
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.stop()

    @property
    def state(self) -> FeedState:
        """Return the current feed state."""
        return self._state

    @property
    def posts(self) -> tuple[Post, ...]:
        """Return the ordered feed, most recent first."""
        return self._state.posts

    @property
    def error_message(self) -> str:
        """Return the last fetch error, or an empty string."""
        return self._state.error_message

    @property
    def is_running(self) -> bool:
        """Return True while a subscription is live."""
        return self.check_subscription()

    def check_subscription(self) -> bool:
        """Return True if the watch is still open.

        The Firestore watch closes itself on a fatal stream error (permission
        denied, exhausted retries) without calling back. A closed watch is
        dropped and reported once as a subscription error; the last posts stay
        in place.
        """
        with self._lock:
            watch = self._watch
            if watch is None:
                return False
            if watch.is_active:
                return True
            self._watch = None
            self._generation += 1
        logger.error(f"Subscription to {POSTS_COLLECTION} was closed by the backend")
        self.report_error(SubscriptionClosedError(POSTS_COLLECTION))
        return False

    def find_post(self, post_id: str) -> Post | None:
        """Return the last observed copy of a post, if it is in the feed."""
        for post in self._state.posts:
            if post.id == post_id:
                return post
        return None

    def add_listener(self, listener: FeedListener) -> Callable[[], None]:
        """Register a callback for state changes and return its remover."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def start(self) -> None:
        """Subscribe to the posts collection, replacing any live subscription."""
        self.stop()
        with self._lock:
            self._generation += 1
            generation = self._generation

        def on_snapshot(docs: list[DocumentSnapshot], changes: Any, read_time: Any) -> None:
            self._dispatcher.submit(self._apply_snapshot, generation, list(docs))

        query = self._db.collection(POSTS_COLLECTION).order_by(
            POST_TIMESTAMP, direction=firestore.Query.DESCENDING
        )
        try:
            watch = query.on_snapshot(on_snapshot)
        except Exception as e:
            logger.error(f"Could not subscribe to {POSTS_COLLECTION}: {e}")
            self.report_error(e)
            return

        with self._lock:
            if generation == self._generation:
                self._watch = watch
                watch = None
        if watch is not None:
            # A concurrent stop() or start() won; this watch is already stale.
            watch.unsubscribe()
        logger.info(f"Subscribed to {POSTS_COLLECTION}")

    def stop(self) -> None:
        """Cancel the subscription. Safe to call repeatedly or before start()."""
        with self._lock:
            watch, self._watch = self._watch, None
            self._generation += 1
        if watch is None:
            return
        try:
            watch.unsubscribe()
            logger.info(f"Unsubscribed from {POSTS_COLLECTION}")
        except Exception as e:
            logger.error(f"Error unsubscribing from {POSTS_COLLECTION}: {e}")

    def report_error(self, error: BaseException) -> None:
        """Record a subscription failure without clearing the feed."""
        self._dispatcher.submit(self._apply_error, error)

    def _apply_snapshot(self, generation: int, docs: list[DocumentSnapshot]) -> None:
        if generation != self._generation:
            return
        self._replace_state(FeedState(posts=decode_posts(docs)))

    def _apply_error(self, error: BaseException) -> None:
        logger.warning(f"Feed subscription error: {error}")
        self._replace_state(
            FeedState(
                posts=self._state.posts,
                error_message=f"Failed to fetch posts: {error}",
            )
        )

    def _replace_state(self, state: FeedState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(f"Feed listener failed: {e}")
