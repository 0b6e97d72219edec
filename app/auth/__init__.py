"""Auth package: local accounts, HS256 tokens, current-user dependencies."""

from app.auth.dependencies import get_current_user, get_db_user

__all__ = [
    "get_current_user",
    "get_db_user",
]
