"""Global constants for the woodpecker application."""

# Database-related constants
FIRESTORE_BATCH_LIMIT = 400

# Collection names
USERS_COLLECTION = "users"
GROUPS_COLLECTION = "groups"
POSTS_COLLECTION = "posts"
PINS_COLLECTION = "pins"
REVIEWS_COLLECTION = "reviews"

# Fields on 'posts' documents
POST_DETAILS = "details"
POST_GROUP_ID = "groupID"
POST_LIKE_COUNT = "likeCount"
POST_LIKED_BY = "likedBy"
POST_PIN_ID = "pinID"
POST_TIMESTAMP = "timestamp"
POST_USER_ID = "userID"

# Fields on the embedded post details
DETAILS_GROUP_NAME = "groupName"
DETAILS_PLACE_NAME = "placeName"
DETAILS_REVIEW_SUMMARY = "reviewSummary"
DETAILS_USER_NAME = "userName"
DETAILS_EVENT_TYPE = "eventType"

# Placeholder name for posts whose group could not be loaded
UNKNOWN_GROUP_NAME = "Unknown Group"

# Review rating bounds
MIN_OVERALL_RATING = 1
MAX_OVERALL_RATING = 5
MIN_PRICE_RATING = 1
MAX_PRICE_RATING = 3

# Like toggle strategies
LIKE_MODE_SNAPSHOT = "snapshot"
LIKE_MODE_TRANSACTION = "transaction"

# Feed illustrations, one per event type
PIN_CREATED_IMAGE_URL = (
    "https://firebasestorage.googleapis.com/v0/b/woodpecker-dd7b8.firebasestorage.app"
    "/o/feedImages%2Fpin.jpg?alt=media"
)
REVIEW_ADDED_IMAGE_URL = (
    "https://firebasestorage.googleapis.com/v0/b/woodpecker-dd7b8.firebasestorage.app"
    "/o/feedImages%2Freview.jpg?alt=media"
)
GROUP_JOINED_IMAGE_URL = (
    "https://firebasestorage.googleapis.com/v0/b/woodpecker-dd7b8.firebasestorage.app"
    "/o/feedImages%2Fuser.png?alt=media"
)
DEFAULT_IMAGE_URL = "https://cdn-icons-png.flaticon.com/512/8635/8635263.png"
