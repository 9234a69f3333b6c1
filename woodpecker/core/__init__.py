"""Core module for the woodpecker application."""

from .types import FirestoreDocument

__all__ = ["FirestoreDocument"]
