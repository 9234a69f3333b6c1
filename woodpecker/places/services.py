"""Service layer for pins and reviews."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Any

from firebase_admin import firestore

from woodpecker.activity.emitter import PostEmitter
from woodpecker.activity.models import EventType
from woodpecker.core.constants import (
    MAX_OVERALL_RATING,
    MAX_PRICE_RATING,
    MIN_OVERALL_RATING,
    MIN_PRICE_RATING,
    PINS_COLLECTION,
    REVIEWS_COLLECTION,
)
from woodpecker.errors import NotFoundError, ValidationError

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

    from .models import Pin, Review

logger = logging.getLogger(__name__)


def _is_rating(value: Any, low: int, high: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and low <= value <= high


def _optional_text(value: Any, field: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string.")
    return value


class PinService:
    """Service class for map pins."""

    @staticmethod
    def get_pin(db: Client, pin_id: str) -> Pin | None:
        """Fetch a pin by id."""
        doc = db.collection(PINS_COLLECTION).document(pin_id).get()
        if not doc.exists:
            return None
        data: Any = doc.to_dict() or {}
        data["id"] = doc.id
        return data

    @staticmethod
    def create_pin(  # noqa: PLR0913
        db: Client,
        user_id: str,
        user_name: str,
        name: str,
        address: str,
        latitude: float,
        longitude: float,
        group_ids: list[str],
    ) -> str:
        """Save a pin and post a pin_created event to each of its groups."""
        name = _optional_text(name, "Pin name").strip()
        address = _optional_text(address, "Address")
        if not name:
            raise ValidationError("Pin name is required.")
        if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
            raise ValidationError("Pin location is out of range.")

        pin_ref = db.collection(PINS_COLLECTION).document()
        pin_ref.set(
            {
                "name": name,
                "address": address,
                "location": firestore.GeoPoint(latitude, longitude),
                "groupIDs": list(group_ids),
                "createdAt": firestore.SERVER_TIMESTAMP,
                "isAdded": bool(group_ids),
            }
        )
        logger.info(f"Pin {pin_ref.id} created by {user_id}")

        PostEmitter.emit_for_groups(
            db,
            EventType.PIN_CREATED,
            user_id=user_id,
            user_name=user_name,
            group_ids=group_ids,
            place_name=name,
            pin_id=pin_ref.id,
        )
        return pin_ref.id


class ReviewService:
    """Service class for reviews and ratings."""

    @staticmethod
    def add_review(  # noqa: PLR0913
        db: Client,
        pin_id: str,
        user_id: str,
        user_name: str,
        overall_rating: int,
        price_rating: int,
        notes: str = "",
    ) -> str:
        """Save a review and post a review_added event to the pin's groups."""
        notes = _optional_text(notes, "Notes")
        if not _is_rating(overall_rating, MIN_OVERALL_RATING, MAX_OVERALL_RATING):
            raise ValidationError(
                f"Overall rating must be between {MIN_OVERALL_RATING} "
                f"and {MAX_OVERALL_RATING}."
            )
        if not _is_rating(price_rating, MIN_PRICE_RATING, MAX_PRICE_RATING):
            raise ValidationError(
                f"Price rating must be between {MIN_PRICE_RATING} "
                f"and {MAX_PRICE_RATING}."
            )

        pin = PinService.get_pin(db, pin_id)
        if pin is None:
            raise NotFoundError("Pin not found.")
        group_ids = list(pin.get("groupIDs") or [])

        review_ref = db.collection(REVIEWS_COLLECTION).document()
        review_ref.set(
            {
                "pinID": pin_id,
                "userID": user_id,
                "priceRating": price_rating,
                "overallRating": overall_rating,
                "notes": notes,
                "imageURLs": [],
                "createdAt": firestore.SERVER_TIMESTAMP,
                "groupIDs": group_ids,
            }
        )
        logger.info(f"Review {review_ref.id} added to pin {pin_id} by {user_id}")

        PostEmitter.emit_for_groups(
            db,
            EventType.REVIEW_ADDED,
            user_id=user_id,
            user_name=user_name,
            group_ids=group_ids,
            place_name=pin.get("name", ""),
            pin_id=pin_id,
            review_summary=notes,
        )
        return review_ref.id

    @staticmethod
    def get_reviews(db: Client, pin_id: str) -> list[Review]:
        """Fetch every review of a pin."""
        docs = (
            db.collection(REVIEWS_COLLECTION)
            .where(filter=firestore.FieldFilter("pinID", "==", pin_id))
            .stream()
        )
        reviews: list[Review] = []
        for doc in docs:
            data: Any = doc.to_dict() or {}
            data["id"] = doc.id
            reviews.append(data)
        return reviews

    @staticmethod
    def average_ratings_by_group(db: Client, pin_id: str) -> dict[str, float]:
        """Average the overall rating of a pin's reviews, per group."""
        reviews = (
            db.collection(REVIEWS_COLLECTION)
            .where(filter=firestore.FieldFilter("pinID", "==", pin_id))
            .stream()
        )
        ratings: dict[str, list[int]] = defaultdict(list)
        for doc in reviews:
            data = doc.to_dict() or {}
            rating = data.get("overallRating")
            group_ids = data.get("groupIDs")
            if not _is_rating(rating, MIN_OVERALL_RATING, MAX_OVERALL_RATING):
                logger.debug(f"Skipping review {doc.id}: bad rating {rating!r}")
                continue
            if not isinstance(group_ids, list):
                logger.debug(f"Skipping review {doc.id}: no groups")
                continue
            for group_id in group_ids:
                ratings[group_id].append(rating)

        return {gid: sum(values) / len(values) for gid, values in ratings.items()}
