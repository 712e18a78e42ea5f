"""Auth module for JWT validation and user dependencies."""

from checkify.auth.dependencies import get_current_user
from checkify.auth.jwt import validate_supabase_jwt
from checkify.auth.schemas import TokenPayload, User

__all__ = [
    "User",
    "TokenPayload",
    "validate_supabase_jwt",
    "get_current_user",
]
