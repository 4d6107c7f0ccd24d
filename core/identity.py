# core/identity.py
"""
Identity provider seam.

Authentication itself happens in the DRF authentication classes configured in
settings (JWT issued elsewhere, session for the admin). Everything below the
views asks this module who the caller is.
"""
from rest_framework.exceptions import NotAuthenticated


class Unauthenticated(NotAuthenticated):
    default_detail = "Authentication credentials were not provided or are invalid."
    default_code = "unauthenticated"


def require_user(user):
    """Return the user if authenticated, else raise Unauthenticated."""
    if user is None or not getattr(user, "is_authenticated", False):
        raise Unauthenticated()
    return user


def current_user(request):
    return require_user(getattr(request, "user", None))


def current_user_id(request) -> int:
    return current_user(request).pk
