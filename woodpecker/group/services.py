"""Service layer for group lookups and membership."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore

from woodpecker.activity.emitter import PostEmitter
from woodpecker.activity.models import EventType
from woodpecker.core.constants import GROUPS_COLLECTION, USERS_COLLECTION
from woodpecker.errors import DuplicateResourceError, NotFoundError, ValidationError

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client


class GroupService:
    """Service class for group-related operations."""

    @staticmethod
    def get_group(db: Client, group_id: str) -> dict[str, Any] | None:
        """Fetch a group by id."""
        if not group_id:
            return None
        doc = db.collection(GROUPS_COLLECTION).document(group_id).get()
        if not doc.exists:
            return None
        data = doc.to_dict() or {}
        data["id"] = doc.id
        return data

    @staticmethod
    def get_group_members(db: Client, group_id: str) -> list[dict[str, Any]]:
        """Batch-fetch the user documents of a group's members."""
        group = GroupService.get_group(db, group_id)
        if group is None:
            return []
        member_ids = [uid for uid in group.get("members") or [] if uid]
        if not member_ids:
            return []

        refs = [db.collection(USERS_COLLECTION).document(uid) for uid in member_ids]
        member_docs = cast(list["DocumentSnapshot"], db.get_all(refs))
        results = []
        for doc in member_docs:
            if doc.exists:
                data = doc.to_dict()
                if data is not None:
                    results.append({"id": doc.id, **data})
        return results

    @staticmethod
    def join_group(db: Client, group_id: str, user_id: str, user_name: str) -> str:
        """Add a user to a group and announce it in the feed.

        Both sides of the membership and the group_joined post are committed
        in one batch. Returns the new post id.
        """
        group = GroupService.get_group(db, group_id)
        if group is None:
            raise NotFoundError("Group not found.")
        if user_id in (group.get("members") or []):
            raise DuplicateResourceError("You are already a member of this group.")

        batch = db.batch()
        group_ref = db.collection(GROUPS_COLLECTION).document(group_id)
        user_ref = db.collection(USERS_COLLECTION).document(user_id)
        batch.update(group_ref, {"members": firestore.ArrayUnion([user_id])})
        batch.update(user_ref, {"groupIDs": firestore.ArrayUnion([group_id])})
        post_data = PostEmitter.build_post(
            EventType.GROUP_JOINED,
            user_id=user_id,
            user_name=user_name,
            group_id=group_id,
            group_name=group.get("name", ""),
        )
        post_id = PostEmitter.emit(db, post_data, batch=batch)
        batch.commit()
        return post_id

    @staticmethod
    def create_group(
        db: Client, user_id: str, name: str, description: str = ""
    ) -> str:
        """Create a custom group with its creator as the only member."""
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Group name cannot be empty.")
        if description is None:
            description = ""
        if not isinstance(description, str):
            raise ValidationError("Group description must be a string.")

        group_ref = db.collection(GROUPS_COLLECTION).document()
        user_ref = db.collection(USERS_COLLECTION).document(user_id)
        batch = db.batch()
        batch.set(
            group_ref,
            {
                "name": name.strip(),
                "description": description,
                "creatorID": user_id,
                "groupType": "custom",
                "imageURL": "",
                "members": [user_id],
                "createdAt": firestore.SERVER_TIMESTAMP,
            },
        )
        batch.update(user_ref, {"groupIDs": firestore.ArrayUnion([group_ref.id])})
        batch.commit()
        return group_ref.id

    @staticmethod
    def leave_group(db: Client, group_id: str, user_id: str) -> None:
        """Remove a user from a group, on both the group and the user."""
        group = GroupService.get_group(db, group_id)
        if group is None:
            raise NotFoundError("Group not found.")
        if user_id not in (group.get("members") or []):
            raise ValidationError("You are not a member of this group.")

        batch = db.batch()
        group_ref = db.collection(GROUPS_COLLECTION).document(group_id)
        user_ref = db.collection(USERS_COLLECTION).document(user_id)
        batch.update(group_ref, {"members": firestore.ArrayRemove([user_id])})
        batch.update(user_ref, {"groupIDs": firestore.ArrayRemove([group_id])})
        batch.commit()
