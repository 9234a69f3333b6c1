"""The places blueprint: map pins and their reviews."""

from flask import Blueprint

bp = Blueprint("places", __name__, url_prefix="/places")

from . import routes  # noqa: E402

__all__ = ["routes"]
