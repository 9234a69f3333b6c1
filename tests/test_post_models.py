"""Tests for decoding activity posts."""

from __future__ import annotations

import datetime
import unittest

from tests.mock_utils import make_doc, post_data
from woodpecker.activity.models import EventType, Post, PostDecodeError

T1 = datetime.datetime(2024, 11, 30, 9, 0, 0)


class PostDecodeTestCase(unittest.TestCase):
    """Test case for Post.from_dict and Post.from_snapshot."""

    def test_decodes_well_formed_document(self) -> None:
        post = Post.from_snapshot(make_doc("p1", post_data(T1, liked_by=["u2", "u3"])))

        self.assertEqual(post.id, "p1")
        self.assertEqual(post.details.user_name, "Alice")
        self.assertEqual(post.details.kind, EventType.PIN_CREATED)
        self.assertEqual(post.group_id, "g1")
        self.assertEqual(post.like_count, 2)
        self.assertEqual(post.liked_by, ("u2", "u3"))
        self.assertEqual(post.timestamp, T1)
        self.assertTrue(post.is_liked_by("u2"))
        self.assertFalse(post.is_liked_by("u1"))
        self.assertFalse(post.is_liked_by(None))

    def test_duplicate_likers_are_collapsed(self) -> None:
        data = post_data(T1, liked_by=["u2", "u3", "u2"], like_count=2)
        post = Post.from_dict(data, "p1")
        self.assertEqual(post.liked_by, ("u2", "u3"))

    def test_missing_field_fails(self) -> None:
        data = post_data(T1)
        del data["userID"]
        with self.assertRaises(PostDecodeError):
            Post.from_dict(data, "p1")

    def test_missing_details_field_fails(self) -> None:
        data = post_data(T1)
        del data["details"]["placeName"]
        with self.assertRaises(PostDecodeError):
            Post.from_dict(data, "p1")

    def test_wrong_types_fail(self) -> None:
        bad_values = {
            "likeCount": "3",
            "likedBy": "u2",
            "timestamp": "yesterday",
            "groupID": 7,
            "details": None,
        }
        for key, value in bad_values.items():
            with self.subTest(field=key):
                data = post_data(T1)
                data[key] = value
                with self.assertRaises(PostDecodeError):
                    Post.from_dict(data, "p1")

    def test_boolean_and_negative_like_counts_fail(self) -> None:
        for value in (True, -1):
            with self.subTest(like_count=value):
                with self.assertRaises(PostDecodeError):
                    Post.from_dict(post_data(T1, like_count=value), "p1")

    def test_empty_document_fails(self) -> None:
        with self.assertRaises(PostDecodeError):
            Post.from_snapshot(make_doc("p1", None))

    def test_unknown_event_type_maps_to_default(self) -> None:
        post = Post.from_dict(post_data(T1, event_type="photo_shared"), "p1")
        self.assertEqual(post.details.kind, EventType.DEFAULT)
        self.assertEqual(post.details.event_type, "photo_shared")

    def test_event_type_is_case_insensitive(self) -> None:
        self.assertEqual(EventType.parse("Review_Added"), EventType.REVIEW_ADDED)

    def test_to_dict_matches_stored_shape(self) -> None:
        data = post_data(T1, liked_by=["u2"])
        self.assertEqual(Post.from_dict(data, "p1").to_dict(), data)


if __name__ == "__main__":
    unittest.main()
