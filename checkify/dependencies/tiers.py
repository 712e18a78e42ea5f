"""Tier resolution dependencies for FastAPI."""

from fastapi import Depends, Query
from sqlalchemy.orm import Session

from checkify.auth.dependencies import get_current_user
from checkify.auth.schemas import User
from checkify.database.session import get_db
from checkify.schemas.tier import TierResolution
from checkify.services.tiers import QuotaEnforcer


async def get_caller_tier(
    tier: str | None = Query(
        default=None,
        description="Tier override (free, pro or max), for testing only; unknown names are ignored",
    ),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> TierResolution:
    """
    Resolve the authenticated caller's tier and limits.

    Usage:
        @router.get("/collection/{todo_list_id}")
        async def get_collection(tier: TierResolution = Depends(get_caller_tier)):
            ...
    """
    return await QuotaEnforcer.resolve_tier(
        db,
        user.id,
        override=tier,
    )
