"""The activity blueprint."""

from flask import Blueprint

bp = Blueprint("activity", __name__, url_prefix="/activity")

from . import routes  # noqa: E402

__all__ = ["routes"]
