"""Decorators for authenticated routes."""

from functools import wraps

from woodpecker.errors import UnauthorizedError

from .identity import current_user_id


def login_required(f):
    """Reject the request with a 401 if no user is signed in.

    Usage:
    @login_required
    def protected_view():
        ...
    """

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if current_user_id() is None:
            raise UnauthorizedError()
        return f(*args, **kwargs)

    return decorated_function
