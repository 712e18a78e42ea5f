"""FastAPI dependencies for authentication."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from checkify.auth.jwt import validate_supabase_jwt
from checkify.auth.schemas import User
from checkify.config import get_settings

# HTTPBearer with auto_error=False so we can handle missing tokens ourselves
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User:
    """
    Get current user from JWT or dev bypass.

    - If DEV_USER_ID is set: return mock user
    - Otherwise: validate JWT and return user from claims

    Usage:
        @router.get("/collection/{todo_list_id}")
        async def get_collection(user: User = Depends(get_current_user)):
            # user.id drives tier resolution and list ownership
            ...
    """
    settings = get_settings()

    if settings.dev_user_id:
        return User(id=settings.dev_user_id, email="dev@local.test")

    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token_payload = validate_supabase_jwt(credentials.credentials)
    return User(id=token_payload.sub, email=token_payload.email)
