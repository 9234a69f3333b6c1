"""Data models for pins and reviews."""

from __future__ import annotations

from typing import Any

from woodpecker.core.types import FirestoreDocument


class Pin(FirestoreDocument, total=False):
    """A pin document in Firestore."""

    name: str
    address: str
    location: Any
    groupIDs: list[str]
    isAdded: bool
    pricingLevel: int


class Review(FirestoreDocument, total=False):
    """A review document in Firestore."""

    pinID: str
    userID: str
    priceRating: int
    overallRating: int
    notes: str
    imageURLs: list[str]
    groupIDs: list[str]
