"""Subscription tier endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from checkify.auth.dependencies import get_current_user
from checkify.auth.schemas import User
from checkify.database.session import get_db
from checkify.schemas.tier import MyTierResponse, TierEntry, TierTableResponse
from checkify.services.tiers import TIER_LIMITS, QuotaEnforcer
from checkify.services.todo_lists import get_user_profile

router = APIRouter(tags=["tiers"])


@router.get("/tiers", response_model=TierTableResponse)
def list_tiers() -> TierTableResponse:
    """List every tier with its limits."""
    return TierTableResponse(
        tiers=[TierEntry(tier=tier, limits=limits) for tier, limits in TIER_LIMITS.items()]
    )


@router.get("/debug/my-tier", response_model=MyTierResponse)
async def my_tier(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MyTierResponse:
    """Show the caller's resolved tier next to the raw profile fields it came from."""
    resolution = await QuotaEnforcer.resolve_tier(db, user.id)
    profile = get_user_profile(db, user.id)

    raw_profile = None
    if profile:
        raw_profile = {
            "subscription_tier": profile.subscription_tier,
            "subscription_status": profile.subscription_status,
            "stripe_customer_id": profile.stripe_customer_id,
        }

    return MyTierResponse(
        user_id=user.id,
        email=user.email,
        tier=resolution,
        raw_profile=raw_profile,
        message=f"Your tier is: {resolution.tier.value} (source: {resolution.source.value})",
    )
