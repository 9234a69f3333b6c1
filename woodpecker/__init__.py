"""Initialize the Flask app and the Firebase services it depends on."""

import atexit
import json
import os

import firebase_admin
from firebase_admin import credentials, firestore
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from .core.constants import LIKE_MODE_SNAPSHOT


def _env_flag(name, default):
    """Read a boolean environment variable."""
    return (os.environ.get(name) or default).lower() in ["true", "1", "t"]


def _init_firebase(app):
    """Initialize the Firebase Admin SDK from the best available credentials."""
    cred = None
    project_id = None

    # First, try to load from environment variable (for production)
    cred_json = os.environ.get("FIREBASE_CREDENTIALS_JSON")
    if cred_json:
        try:
            cred_info = json.loads(cred_json)
            project_id = cred_info.get("project_id")
            cred = credentials.Certificate(cred_info)
        except (json.JSONDecodeError, ValueError) as e:
            app.logger.error(f"Error parsing FIREBASE_CREDENTIALS_JSON: {e}")

    # If env var fails or is not present, try loading from file (for local dev)
    if not cred:
        cred_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)), "firebase_credentials.json"
        )
        if os.path.exists(cred_path):
            try:
                with open(cred_path, "r") as f:
                    cred_info = json.load(f)
                project_id = cred_info.get("project_id")
                cred = credentials.Certificate(cred_path)
            except (json.JSONDecodeError, ValueError) as e:
                app.logger.error(f"Error loading credentials from file: {e}")

    # If both methods fail, fallback to default credentials
    if not cred:
        try:
            cred = credentials.ApplicationDefault()
            project_id = os.environ.get("FIREBASE_PROJECT_ID")
        except Exception as e:
            app.logger.error(
                f"Could not find any valid credentials (env, file, or default): {e}"
            )

    if cred and not firebase_admin._apps:
        try:
            storage_bucket = os.environ.get("FIREBASE_STORAGE_BUCKET")
            if not storage_bucket and project_id:
                storage_bucket = f"{project_id}.firebasestorage.app"

            firebase_options = {"storageBucket": storage_bucket}
            if project_id:
                firebase_options["projectId"] = project_id

            firebase_admin.initialize_app(cred, firebase_options)
        except ValueError:
            # This can happen if the app is already initialized, which is fine.
            app.logger.info("Firebase app already initialized.")


def _start_live_feed(app):
    """Keep a live copy of the activity feed for the lifetime of the process."""
    from .activity.feed import FeedSynchronizer
    from .activity.routes import FEED_EXTENSION

    try:
        feed = FeedSynchronizer(firestore.client())
    except Exception as e:
        app.logger.error(f"Could not create the live activity feed: {e}")
        return
    feed.start()
    app.extensions[FEED_EXTENSION] = feed
    atexit.register(feed.stop)


def create_app(test_config=None):
    """Create and configure an instance of the Flask application."""
    app = Flask(__name__, instance_relative_config=True)

    # Load configuration
    app.config.from_mapping(
        SECRET_KEY=os.environ.get("SECRET_KEY") or "dev",
        LIKE_TOGGLE_MODE=os.environ.get("LIKE_TOGGLE_MODE") or LIKE_MODE_SNAPSHOT,
        FEED_LIVE_SYNC=_env_flag("FEED_LIVE_SYNC", "true"),
    )

    if test_config:
        app.config.update(test_config)

    # Initialize Firebase Admin SDK only if not in testing mode
    if not app.config.get("TESTING"):
        _init_firebase(app)

    # Register blueprints
    from . import activity as activity_bp

    app.register_blueprint(activity_bp.bp)

    from . import group as group_bp

    app.register_blueprint(group_bp.bp)

    from . import places as places_bp

    app.register_blueprint(places_bp.bp)

    from . import error_handlers

    app.register_blueprint(error_handlers.error_handlers_bp)

    from .auth.identity import load_logged_in_user

    app.before_request(load_logged_in_user)

    if app.config.get("FEED_LIVE_SYNC") and not app.config.get("TESTING"):
        _start_live_feed(app)

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    return app
