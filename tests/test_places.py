"""Tests for pins, reviews and ratings."""

from __future__ import annotations

import unittest

from tests.mock_utils import MockGeoPoint, make_mock_db, patch_firestore
from woodpecker import create_app
from woodpecker.activity.services import ActivityService
from woodpecker.errors import NotFoundError, ValidationError
from woodpecker.places.services import PinService, ReviewService


class PlacesServiceTestCase(unittest.TestCase):
    """Test case for PinService and ReviewService."""

    def setUp(self) -> None:
        self.db = make_mock_db()
        patch_firestore(self, self.db)
        self.db.collection("groups").document("g1").set({"name": "Hikers"})
        self.db.collection("groups").document("g2").set({"name": "Foodies"})
        self.db.collection("pins").document("pin1").set(
            {"name": "Blue Bottle", "address": "1 Main St", "groupIDs": ["g1", "g2"]}
        )

    def _posts(self, event_type: str):
        return [
            p
            for p in ActivityService.get_posts(self.db)
            if p.details.event_type == event_type
        ]

    def test_create_pin_emits_a_post_per_group(self) -> None:
        pin_id = PinService.create_pin(
            self.db,
            user_id="u1",
            user_name="Alice",
            name="  Cafe  ",
            address="2 Side St",
            latitude=37.77,
            longitude=-122.41,
            group_ids=["g1", "g2"],
        )

        pin = PinService.get_pin(self.db, pin_id)
        self.assertEqual(pin["name"], "Cafe")
        self.assertIsInstance(pin["location"], MockGeoPoint)
        self.assertTrue(pin["isAdded"])

        posts = self._posts("pin_created")
        self.assertEqual(sorted(p.group_id for p in posts), ["g1", "g2"])
        self.assertTrue(all(p.pin_id == pin_id for p in posts))
        self.assertTrue(all(p.details.place_name == "Cafe" for p in posts))

    def test_create_pin_validation(self) -> None:
        with self.assertRaises(ValidationError):
            PinService.create_pin(self.db, "u1", "Alice", " ", "", 0, 0, [])
        with self.assertRaises(ValidationError):
            PinService.create_pin(self.db, "u1", "Alice", "Cafe", "", 91, 0, [])

    def test_add_review_emits_review_posts(self) -> None:
        review_id = ReviewService.add_review(
            self.db, "pin1", "u1", "Alice", overall_rating=4, price_rating=2,
            notes="Great pour-over",
        )

        review = self.db.collection("reviews").document(review_id).get().to_dict()
        self.assertEqual(review["groupIDs"], ["g1", "g2"])
        self.assertEqual(review["imageURLs"], [])

        posts = self._posts("review_added")
        self.assertEqual(len(posts), 2)
        self.assertTrue(
            all(p.details.review_summary == "Great pour-over" for p in posts)
        )
        self.assertTrue(all(p.details.place_name == "Blue Bottle" for p in posts))

    def test_add_review_validation(self) -> None:
        for overall, price in [(0, 2), (6, 2), (3, 0), (3, 4), (True, 2), ("5", 2)]:
            with self.subTest(overall=overall, price=price):
                with self.assertRaises(ValidationError):
                    ReviewService.add_review(self.db, "pin1", "u1", "Alice", overall, price)

    def test_text_fields_must_be_strings(self) -> None:
        with self.assertRaises(ValidationError):
            ReviewService.add_review(self.db, "pin1", "u1", "Alice", 4, 2, notes=42)
        with self.assertRaises(ValidationError):
            PinService.create_pin(self.db, "u1", "Alice", 7, "", 0, 0, ["g1"])
        with self.assertRaises(ValidationError):
            PinService.create_pin(self.db, "u1", "Alice", "Cafe", ["x"], 0, 0, ["g1"])

        self.assertEqual(ActivityService.get_posts(self.db), ())
        self.assertEqual(list(self.db.collection("reviews").stream()), [])

    def test_review_without_notes_stays_in_the_feed(self) -> None:
        ReviewService.add_review(self.db, "pin1", "u1", "Alice", 4, 2, notes=None)

        posts = self._posts("review_added")
        self.assertEqual(len(posts), 2)
        self.assertTrue(all(p.details.review_summary == "" for p in posts))

    def test_get_reviews(self) -> None:
        reviews = self.db.collection("reviews")
        reviews.document("r1").set({"pinID": "pin1", "overallRating": 5, "notes": "A"})
        reviews.document("r2").set({"pinID": "other", "overallRating": 1})

        found = ReviewService.get_reviews(self.db, "pin1")

        self.assertEqual([r["id"] for r in found], ["r1"])
        self.assertEqual(found[0]["notes"], "A")
        self.assertEqual(ReviewService.get_reviews(self.db, "nope"), [])

    def test_add_review_missing_pin(self) -> None:
        with self.assertRaises(NotFoundError):
            ReviewService.add_review(self.db, "nope", "u1", "Alice", 3, 2)

    def test_average_ratings_by_group(self) -> None:
        reviews = self.db.collection("reviews")
        reviews.document("r1").set(
            {"pinID": "pin1", "overallRating": 5, "groupIDs": ["g1", "g2"]}
        )
        reviews.document("r2").set(
            {"pinID": "pin1", "overallRating": 2, "groupIDs": ["g1"]}
        )
        reviews.document("r3").set(
            {"pinID": "pin1", "overallRating": "bad", "groupIDs": ["g1"]}
        )
        reviews.document("r4").set(
            {"pinID": "other", "overallRating": 1, "groupIDs": ["g1"]}
        )

        averages = ReviewService.average_ratings_by_group(self.db, "pin1")

        self.assertEqual(averages, {"g1": 3.5, "g2": 5.0})

    def test_average_ratings_without_reviews(self) -> None:
        self.assertEqual(ReviewService.average_ratings_by_group(self.db, "pin1"), {})


class PlacesRoutesTestCase(unittest.TestCase):
    """Test case for the places blueprint."""

    def setUp(self) -> None:
        self.db = make_mock_db()
        patch_firestore(self, self.db)
        self.db.collection("users").document("user1").set({"name": "Alice"})
        self.db.collection("groups").document("g1").set({"name": "Hikers"})
        self.db.collection("pins").document("pin1").set(
            {"name": "Blue Bottle", "address": "", "groupIDs": ["g1"]}
        )
        self.app = create_app({"TESTING": True})
        self.client = self.app.test_client()
        with self.client.session_transaction() as sess:
            sess["user_id"] = "user1"

    def test_create_pin(self) -> None:
        response = self.client.post(
            "/places/pins",
            json={"name": "Cafe", "latitude": 1.5, "longitude": 2.5, "group_ids": ["g1"]},
        )
        self.assertEqual(response.status_code, 201)
        self.assertIsNotNone(PinService.get_pin(self.db, response.get_json()["pin_id"]))

    def test_create_pin_bad_body(self) -> None:
        response = self.client.post("/places/pins", json={"name": "Cafe"})
        self.assertEqual(response.status_code, 400)
        response = self.client.post("/places/pins", data="not json")
        self.assertEqual(response.status_code, 400)

    def test_add_review_and_read_ratings(self) -> None:
        response = self.client.post(
            "/places/pins/pin1/reviews",
            json={"overall_rating": 4, "price_rating": 1, "notes": "Nice"},
        )
        self.assertEqual(response.status_code, 201)

        response = self.client.get("/places/pins/pin1/ratings")
        self.assertEqual(response.get_json(), {"ratings": {"g1": 4.0}})

        response = self.client.get("/places/pins/pin1/reviews")
        reviews = response.get_json()["reviews"]
        self.assertEqual(len(reviews), 1)
        self.assertEqual(reviews[0]["notes"], "Nice")
        self.assertEqual(reviews[0]["overall_rating"], 4)
        self.assertEqual(reviews[0]["group_ids"], ["g1"])

    def test_reviews_of_unknown_pin(self) -> None:
        response = self.client.get("/places/pins/nope/reviews")
        self.assertEqual(response.status_code, 404)

    def test_non_string_text_fields_are_rejected(self) -> None:
        response = self.client.post(
            "/places/pins/pin1/reviews",
            json={"overall_rating": 4, "price_rating": 1, "notes": 42},
        )
        self.assertEqual(response.status_code, 400)
        response = self.client.post(
            "/places/pins",
            json={"name": 7, "latitude": 1.5, "longitude": 2.5, "group_ids": ["g1"]},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.client.get("/activity/").get_json()["posts"], [])


if __name__ == "__main__":
    unittest.main()
