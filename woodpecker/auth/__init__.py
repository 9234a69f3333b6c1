"""Authentication helpers shared by the blueprints."""

from .decorators import login_required
from .identity import current_user_id, current_user_name

__all__ = ["login_required", "current_user_id", "current_user_name"]
