"""Routes for the places blueprint."""

from firebase_admin import firestore
from flask import jsonify, request

from woodpecker.auth import current_user_id, current_user_name, login_required
from woodpecker.errors import NotFoundError, ValidationError

from . import bp
from .services import PinService, ReviewService


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data


@bp.route("/pins", methods=["POST"])
@login_required
def create_pin():
    """Create a pin shared with the given groups."""
    data = _json_body()
    try:
        latitude = float(data["latitude"])
        longitude = float(data["longitude"])
    except (KeyError, TypeError, ValueError):
        raise ValidationError("Latitude and longitude are required.") from None

    group_ids = data.get("group_ids") or []
    if not isinstance(group_ids, list):
        raise ValidationError("group_ids must be a list.")

    db = firestore.client()
    pin_id = PinService.create_pin(
        db,
        user_id=current_user_id(),
        user_name=current_user_name(),
        name=data.get("name", ""),
        address=data.get("address", ""),
        latitude=latitude,
        longitude=longitude,
        group_ids=[str(gid) for gid in group_ids],
    )
    return jsonify(success=True, pin_id=pin_id), 201


@bp.route("/pins/<string:pin_id>/reviews", methods=["POST"])
@login_required
def add_review(pin_id):
    """Review a pin."""
    data = _json_body()
    db = firestore.client()
    review_id = ReviewService.add_review(
        db,
        pin_id=pin_id,
        user_id=current_user_id(),
        user_name=current_user_name(),
        overall_rating=data.get("overall_rating"),
        price_rating=data.get("price_rating"),
        notes=data.get("notes", ""),
    )
    return jsonify(success=True, review_id=review_id), 201


@bp.route("/pins/<string:pin_id>/ratings", methods=["GET"])
@login_required
def view_ratings(pin_id):
    """Return the average overall rating per group for a pin."""
    db = firestore.client()
    return jsonify(ratings=ReviewService.average_ratings_by_group(db, pin_id))


@bp.route("/pins/<string:pin_id>/reviews", methods=["GET"])
@login_required
def view_reviews(pin_id):
    """Return the reviews of a pin."""
    db = firestore.client()
    if PinService.get_pin(db, pin_id) is None:
        raise NotFoundError("Pin not found.")
    reviews = ReviewService.get_reviews(db, pin_id)
    return jsonify(
        reviews=[
            {
                "id": review["id"],
                "user_id": review.get("userID", ""),
                "overall_rating": review.get("overallRating"),
                "price_rating": review.get("priceRating"),
                "notes": review.get("notes", ""),
                "image_urls": review.get("imageURLs", []),
                "group_ids": review.get("groupIDs", []),
            }
            for review in reviews
        ]
    )
