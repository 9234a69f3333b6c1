"""Resolve the authenticated principal for the current request."""

from __future__ import annotations

from typing import Any

from firebase_admin import auth, firestore
from flask import current_app, g, request, session

from woodpecker.core.constants import USERS_COLLECTION


def _uid_from_bearer_token() -> str | None:
    """Verify a Firebase ID token from the Authorization header, if present."""
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    token = header[len("Bearer ") :].strip()
    if not token:
        return None
    try:
        decoded = auth.verify_id_token(token)
    except (
        auth.InvalidIdTokenError,
        auth.ExpiredIdTokenError,
        auth.CertificateFetchError,
        ValueError,
    ) as e:
        current_app.logger.warning(f"Rejected ID token: {e}")
        return None
    return decoded.get("uid")


def load_logged_in_user() -> None:
    """Load the signed-in user's Firestore document into g.user."""
    g.user = None
    user_id = session.get("user_id") or _uid_from_bearer_token()
    if user_id is None:
        return

    try:
        db = firestore.client()
        user_doc = db.collection(USERS_COLLECTION).document(user_id).get()
        if user_doc.exists:
            g.user = user_doc.to_dict() or {}
            g.user["uid"] = user_id
        else:
            session.clear()
            current_app.logger.warning(
                f"User {user_id} authenticated but not found in Firestore."
            )
    except Exception as e:
        current_app.logger.error(f"Error loading user: {e}")
        session.clear()


def current_user() -> dict[str, Any] | None:
    """Return the signed-in user's data, or None."""
    return g.get("user")


def current_user_id() -> str | None:
    """Return the stable identifier of the signed-in user, or None."""
    user = current_user()
    if not user:
        return None
    return user.get("uid") or None


def current_user_name() -> str:
    """Return the display name used when denormalizing posts."""
    user = current_user() or {}
    return str(user.get("name") or user.get("username") or "")
