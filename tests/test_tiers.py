"""Tests for tier resolution and limits."""

import asyncio

import httpx
import pytest

from checkify.config import get_settings
from checkify.models import UserProfile
from checkify.models.enums import SubscriptionTier, TierSource
from checkify.services.tiers import (
    TIER_LIMITS,
    QuotaEnforcer,
    get_tier_limits,
    parse_tier,
    tier_for_price,
)
from tests.notion_fakes import FakeBilling, FakeSubscription


@pytest.fixture
def stripe_prices(monkeypatch):
    monkeypatch.setenv("STRIPE_PRICE_ID_PRO", "price_pro")
    monkeypatch.setenv("STRIPE_PRICE_ID_MAX", "price_max")
    get_settings.cache_clear()


def _add_profile(session, user_id, tier="free", customer_id=None, status="active"):
    profile = UserProfile(
        user_id=user_id,
        subscription_tier=tier,
        subscription_status=status,
        stripe_customer_id=customer_id,
    )
    session.add(profile)
    session.commit()
    return profile


def _resolve(session, user_id, **kwargs):
    return asyncio.run(QuotaEnforcer.resolve_tier(session, user_id, **kwargs))


class TestTierLimits:
    def test_table_values(self):
        assert TIER_LIMITS[SubscriptionTier.FREE].max_pages == 25
        assert TIER_LIMITS[SubscriptionTier.FREE].max_checkboxes_per_page == 25
        assert TIER_LIMITS[SubscriptionTier.PRO].max_pages == 100
        assert TIER_LIMITS[SubscriptionTier.MAX].max_pages == 500
        assert TIER_LIMITS[SubscriptionTier.MAX].max_checkboxes_per_page == 1000

    def test_unknown_tier_falls_back_to_free_limits(self):
        assert get_tier_limits("enterprise") == TIER_LIMITS[SubscriptionTier.FREE]
        assert get_tier_limits(None) == TIER_LIMITS[SubscriptionTier.FREE]
        assert get_tier_limits("pro") == TIER_LIMITS[SubscriptionTier.PRO]

    def test_parse_tier(self):
        assert parse_tier("max") == SubscriptionTier.MAX
        assert parse_tier("gold") is None
        assert parse_tier("") is None

    def test_tier_for_price(self, stripe_prices):
        assert tier_for_price("price_pro") == SubscriptionTier.PRO
        assert tier_for_price("price_max") == SubscriptionTier.MAX
        assert tier_for_price("price_other") == SubscriptionTier.FREE
        assert tier_for_price(None) == SubscriptionTier.FREE


class TestResolveTier:
    def test_no_user_gets_default(self, session):
        resolution = _resolve(session, None)

        assert resolution.tier == SubscriptionTier.FREE
        assert resolution.source == TierSource.DEFAULT

    def test_missing_profile_gets_default(self, session, test_user_id):
        resolution = _resolve(session, test_user_id)

        assert resolution.tier == SubscriptionTier.FREE
        assert resolution.source == TierSource.DEFAULT

    def test_persisted_tier_is_used(self, session, test_user_id):
        _add_profile(session, test_user_id, tier="pro")

        resolution = _resolve(session, test_user_id)

        assert resolution.tier == SubscriptionTier.PRO
        assert resolution.source == TierSource.DATABASE
        assert resolution.limits.max_pages == 100

    def test_invalid_persisted_tier_falls_back(self, session, test_user_id):
        _add_profile(session, test_user_id, tier="platinum", status="past_due")

        resolution = _resolve(session, test_user_id)

        assert resolution.tier == SubscriptionTier.FREE
        assert resolution.source == TierSource.DEFAULT
        assert resolution.status == "past_due"

    def test_override_wins(self, session, test_user_id):
        _add_profile(session, test_user_id, tier="pro")

        resolution = _resolve(session, test_user_id, override="max")

        assert resolution.tier == SubscriptionTier.MAX
        assert resolution.source == TierSource.TEST_OVERRIDE
        assert resolution.limits.max_checkboxes_per_page == 1000

    def test_unknown_override_is_ignored(self, session, test_user_id):
        _add_profile(session, test_user_id, tier="pro")

        resolution = _resolve(session, test_user_id, override="gold")

        assert resolution.tier == SubscriptionTier.PRO
        assert resolution.source == TierSource.DATABASE

    def test_override_disabled_by_settings(self, session, test_user_id, monkeypatch):
        monkeypatch.setenv("ALLOW_TIER_OVERRIDE", "false")
        get_settings.cache_clear()

        resolution = _resolve(session, None, override="max")

        assert resolution.tier == SubscriptionTier.FREE
        assert resolution.source == TierSource.DEFAULT


class TestBillingReconciliation:
    def test_paid_subscription_upgrades_and_writes_back(self, session, test_user_id, stripe_prices):
        _add_profile(session, test_user_id, tier="free", customer_id="cus_123")
        billing = FakeBilling([FakeSubscription("price_max")])

        resolution = _resolve(session, test_user_id, billing=billing)

        assert resolution.tier == SubscriptionTier.MAX
        assert resolution.source == TierSource.BILLING
        assert resolution.billing_customer_id == "cus_123"
        assert billing.calls == ["cus_123"]

        session.expire_all()
        profile = session.get(UserProfile, test_user_id)
        assert profile.subscription_tier == "max"

    def test_no_active_subscription_keeps_database_tier(self, session, test_user_id, stripe_prices):
        _add_profile(session, test_user_id, tier="free", customer_id="cus_123")

        resolution = _resolve(session, test_user_id, billing=FakeBilling([]))

        assert resolution.tier == SubscriptionTier.FREE
        assert resolution.source == TierSource.DATABASE

    def test_unknown_price_keeps_database_tier(self, session, test_user_id, stripe_prices):
        _add_profile(session, test_user_id, tier="free", customer_id="cus_123")
        billing = FakeBilling([FakeSubscription("price_legacy")])

        resolution = _resolve(session, test_user_id, billing=billing)

        assert resolution.source == TierSource.DATABASE

    def test_billing_failure_falls_through(self, session, test_user_id, stripe_prices):
        _add_profile(session, test_user_id, tier="free", customer_id="cus_123")
        billing = FakeBilling(error=httpx.ConnectError("stripe unreachable"))

        resolution = _resolve(session, test_user_id, billing=billing)

        assert resolution.tier == SubscriptionTier.FREE
        assert resolution.source == TierSource.DATABASE

    def test_unknown_persisted_tier_skips_billing(self, session, test_user_id, stripe_prices):
        _add_profile(session, test_user_id, tier="enterprise", customer_id="cus_123")
        billing = FakeBilling([FakeSubscription("price_max")])

        resolution = _resolve(session, test_user_id, billing=billing)

        assert billing.calls == []
        assert resolution.tier == SubscriptionTier.FREE
        assert resolution.source == TierSource.DEFAULT
        assert resolution.billing_customer_id == "cus_123"

    def test_empty_persisted_tier_is_reconciled(self, session, test_user_id, stripe_prices):
        _add_profile(session, test_user_id, tier=None, customer_id="cus_123")
        billing = FakeBilling([FakeSubscription("price_pro")])

        resolution = _resolve(session, test_user_id, billing=billing)

        assert billing.calls == ["cus_123"]
        assert resolution.tier == SubscriptionTier.PRO
        assert resolution.source == TierSource.BILLING

    def test_paid_profile_skips_billing(self, session, test_user_id, stripe_prices):
        _add_profile(session, test_user_id, tier="pro", customer_id="cus_123")
        billing = FakeBilling([FakeSubscription("price_max")])

        resolution = _resolve(session, test_user_id, billing=billing)

        assert resolution.tier == SubscriptionTier.PRO
        assert billing.calls == []

    def test_no_billing_configured(self, session, test_user_id):
        _add_profile(session, test_user_id, tier="free", customer_id="cus_123")

        resolution = _resolve(session, test_user_id)

        assert resolution.source == TierSource.DATABASE
