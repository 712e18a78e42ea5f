"""Subscription tier resolution and quota limits."""

import logging

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from checkify.config import get_settings
from checkify.models.enums import SubscriptionTier, TierSource
from checkify.models.user_profile import UserProfile
from checkify.schemas.tier import TierLimits, TierResolution
from checkify.services.billing import StripeBilling, get_billing_client
from checkify.services.todo_lists import get_user_profile, update_subscription

logger = logging.getLogger(__name__)

DEFAULT_TIER = SubscriptionTier.FREE

TIER_LIMITS: dict[SubscriptionTier, TierLimits] = {
    SubscriptionTier.FREE: TierLimits(max_pages=25, max_checkboxes_per_page=25, max_todo_lists=2),
    SubscriptionTier.PRO: TierLimits(max_pages=100, max_checkboxes_per_page=100, max_todo_lists=10),
    SubscriptionTier.MAX: TierLimits(max_pages=500, max_checkboxes_per_page=1000, max_todo_lists=25),
}


def parse_tier(value: str | None) -> SubscriptionTier | None:
    """Return the tier named by value, or None if it is not a known tier."""
    if not value:
        return None
    try:
        return SubscriptionTier(value)
    except ValueError:
        return None


def get_tier_limits(tier: SubscriptionTier | str | None) -> TierLimits:
    """Limits for a tier; unknown or missing tiers get the default tier's limits."""
    parsed = tier if isinstance(tier, SubscriptionTier) else parse_tier(tier)
    return TIER_LIMITS.get(parsed, TIER_LIMITS[DEFAULT_TIER])


def tier_for_price(price_id: str | None) -> SubscriptionTier:
    settings = get_settings()
    if price_id and price_id == settings.stripe_price_id_pro:
        return SubscriptionTier.PRO
    if price_id and price_id == settings.stripe_price_id_max:
        return SubscriptionTier.MAX
    return SubscriptionTier.FREE


def _resolution(
    tier: SubscriptionTier,
    source: TierSource,
    status: str | None = None,
    billing_customer_id: str | None = None,
) -> TierResolution:
    return TierResolution(
        tier=tier,
        status=status or "active",
        source=source,
        billing_customer_id=billing_customer_id,
        limits=get_tier_limits(tier),
    )


class QuotaEnforcer:
    """
    Resolves a caller's subscription tier and the limits that come with it.

    Resolution order, later steps winning when they produce a tier:
    1. default tier
    2. tier persisted on the user's profile
    3. Stripe, when the profile has a customer id but a free/absent tier
    4. an explicit test override
    """

    @staticmethod
    async def resolve_tier(
        db: Session,
        user_id: str | None,
        override: str | None = None,
        billing: StripeBilling | None = None,
    ) -> TierResolution:
        if user_id:
            resolution = await QuotaEnforcer._resolve_persisted_tier(db, user_id, billing)
        else:
            logger.warning("No user context available, defaulting to free tier")
            resolution = _resolution(DEFAULT_TIER, TierSource.DEFAULT)

        if override:
            resolution = QuotaEnforcer._apply_override(resolution, override)

        logger.info(
            f"Using {resolution.tier.value} tier from {resolution.source.value} for user {user_id}"
        )
        return resolution

    @staticmethod
    def _apply_override(resolution: TierResolution, override: str) -> TierResolution:
        settings = get_settings()
        override_tier = parse_tier(override)
        if not settings.allow_tier_override:
            logger.warning(f"Tier override {override!r} ignored: overrides are disabled")
            return resolution
        if override_tier is None:
            logger.warning(f"Ignoring unknown tier override {override!r}")
            return resolution

        logger.info(f"Overriding tier to {override_tier.value} for testing")
        return _resolution(
            override_tier,
            TierSource.TEST_OVERRIDE,
            status=resolution.status,
            billing_customer_id=resolution.billing_customer_id,
        )

    @staticmethod
    async def _resolve_persisted_tier(
        db: Session,
        user_id: str,
        billing: StripeBilling | None,
    ) -> TierResolution:
        try:
            profile = get_user_profile(db, user_id)
        except SQLAlchemyError as e:
            logger.warning(f"Failed to fetch user profile for {user_id}: {e}")
            return _resolution(DEFAULT_TIER, TierSource.DEFAULT)

        if not profile:
            logger.warning(f"No profile found for user {user_id}")
            return _resolution(DEFAULT_TIER, TierSource.DEFAULT)

        persisted = parse_tier(profile.subscription_tier)
        # Only an empty or free tier is reconciled; unknown names are left alone
        unpaid = profile.subscription_tier in (None, "", SubscriptionTier.FREE.value)
        if profile.stripe_customer_id and unpaid:
            reconciled = await QuotaEnforcer._reconcile_with_billing(db, profile, billing)
            if reconciled:
                return reconciled

        if persisted:
            return _resolution(
                persisted,
                TierSource.DATABASE,
                status=profile.subscription_status,
                billing_customer_id=profile.stripe_customer_id,
            )

        logger.warning(
            f"Invalid tier {profile.subscription_tier!r} for user {user_id}, "
            f"defaulting to {DEFAULT_TIER.value}"
        )
        return _resolution(
            DEFAULT_TIER,
            TierSource.DEFAULT,
            status=profile.subscription_status,
            billing_customer_id=profile.stripe_customer_id,
        )

    @staticmethod
    async def _reconcile_with_billing(
        db: Session,
        profile: UserProfile,
        billing: StripeBilling | None,
    ) -> TierResolution | None:
        """Look for a paid subscription Stripe knows about but the profile does not."""
        billing = billing or get_billing_client()
        if billing is None:
            return None

        logger.info(
            f"User {profile.user_id} has Stripe customer but shows free tier, checking Stripe..."
        )
        try:
            subscriptions = await billing.list_active_subscriptions(profile.stripe_customer_id)
        except httpx.HTTPError as e:
            logger.error(f"Failed to check Stripe for user {profile.user_id}: {e}")
            return None

        if not subscriptions:
            return None

        subscription = subscriptions[0]
        tier = tier_for_price(subscription.price_id)
        if tier == SubscriptionTier.FREE:
            return None

        logger.info(
            f"Found active {tier.value} subscription in Stripe for user {profile.user_id}, "
            "updating database..."
        )
        try:
            update_subscription(db, profile.user_id, tier.value, subscription.status)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to persist reconciled tier for {profile.user_id}: {e}")

        return _resolution(
            tier,
            TierSource.BILLING,
            status=subscription.status,
            billing_customer_id=profile.stripe_customer_id,
        )
