"""Shared API dependencies."""

from typing import Optional

from fastapi import Header

from ..core.auth import AuthContext


def get_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-ID")) -> Optional[str]:
    """Extract user ID from gateway headers."""
    return x_user_id


def get_auth_context(x_user_id: Optional[str] = Header(None, alias="X-User-ID")) -> AuthContext:
    """Authorization context for the calling user.

    Collections are shared, so a missing header is allowed.
    """
    return AuthContext(user_id=get_user_id(x_user_id))
