"""Routes for the activity blueprint."""

from firebase_admin import firestore
from flask import current_app, jsonify

from woodpecker.auth import current_user_id, login_required
from woodpecker.core.constants import LIKE_MODE_TRANSACTION
from woodpecker.errors import NotFoundError

from . import bp
from .likes import LikeService
from .models import FeedState
from .services import ActivityService
from .utils import serialize_post

FEED_EXTENSION = "activity_feed"


def _live_feed():
    """Return the app's running feed synchronizer, if any."""
    feed = current_app.extensions.get(FEED_EXTENSION)
    if feed is not None and feed.is_running:
        return feed
    return None


@bp.route("/", methods=["GET"])
@login_required
def view_feed():
    """Return the activity feed, most recent first."""
    feed = _live_feed()
    if feed is not None:
        state = feed.state
    else:
        db = firestore.client()
        try:
            state = FeedState(posts=ActivityService.get_posts(db))
        except Exception as e:
            current_app.logger.error(f"Error fetching posts: {e}")
            state = FeedState(error_message=f"Failed to fetch posts: {e}")

    viewer_id = current_user_id()
    return jsonify(
        posts=[serialize_post(post, viewer_id) for post in state.posts],
        error=state.error_message,
    )


@bp.route("/<string:post_id>/like", methods=["POST"])
@login_required
def toggle_like(post_id):
    """Like or unlike a post for the current user."""
    db = firestore.client()
    user_id = current_user_id()

    if current_app.config.get("LIKE_TOGGLE_MODE") == LIKE_MODE_TRANSACTION:
        liked = LikeService.toggle_like_transactional(db, post_id, user_id)
        return jsonify(success=liked is not None, liked=liked)

    feed = _live_feed()
    post = feed.find_post(post_id) if feed is not None else None
    if post is None:
        post = ActivityService.get_post(db, post_id)
    if post is None:
        raise NotFoundError("Post not found.")

    liked = post.is_liked_by(user_id)
    success = LikeService.toggle_like(db, post, user_id)
    if success:
        liked = not liked
    return jsonify(success=success, liked=liked)
