"""Routes for the group blueprint."""

from firebase_admin import firestore
from flask import current_app, jsonify, request

from woodpecker.auth import current_user_id, current_user_name, login_required
from woodpecker.errors import NotFoundError, ValidationError

from . import bp
from .services import GroupService


@bp.route("/<string:group_id>", methods=["GET"])
@login_required
def view_group(group_id):
    """Return a group and its members."""
    db = firestore.client()
    group = GroupService.get_group(db, group_id)
    if group is None:
        raise NotFoundError("Group not found.")
    members = GroupService.get_group_members(db, group_id)
    return jsonify(
        id=group["id"],
        name=group.get("name", ""),
        description=group.get("description", ""),
        image_url=group.get("imageURL"),
        members=[{"id": m["id"], "name": m.get("name", "")} for m in members],
    )


@bp.route("/<string:group_id>/join", methods=["POST"])
@login_required
def join_group(group_id):
    """Join a group."""
    db = firestore.client()
    user_id = current_user_id()
    post_id = GroupService.join_group(db, group_id, user_id, current_user_name())
    current_app.logger.info(f"User {user_id} joined group {group_id}")
    return jsonify(success=True, post_id=post_id)


@bp.route("/", methods=["POST"])
@login_required
def create_group():
    """Create a group owned by the current user."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    db = firestore.client()
    user_id = current_user_id()
    group_id = GroupService.create_group(
        db, user_id, data.get("name"), data.get("description", "")
    )
    current_app.logger.info(f"User {user_id} created group {group_id}")
    return jsonify(success=True, group_id=group_id), 201


@bp.route("/<string:group_id>/leave", methods=["POST"])
@login_required
def leave_group(group_id):
    """Leave a group."""
    db = firestore.client()
    user_id = current_user_id()
    GroupService.leave_group(db, group_id, user_id)
    current_app.logger.info(f"User {user_id} left group {group_id}")
    return jsonify(success=True)
