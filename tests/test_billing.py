"""Tests for Stripe subscription lookups."""

import asyncio

import httpx
import pytest

from checkify.config import get_settings
from checkify.services.billing import StripeBilling, get_billing_client


def _billing(handler) -> StripeBilling:
    return StripeBilling(
        "sk_test_123",
        api_base="https://stripe.test/v1",
        transport=httpx.MockTransport(handler),
    )


def test_lists_active_subscriptions():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "object": "list",
                "data": [
                    {
                        "id": "sub_1",
                        "status": "active",
                        "items": {"data": [{"price": {"id": "price_pro"}}]},
                    }
                ],
            },
        )

    subscriptions = asyncio.run(_billing(handler).list_active_subscriptions("cus_123"))

    assert len(subscriptions) == 1
    assert subscriptions[0].subscription_id == "sub_1"
    assert subscriptions[0].price_id == "price_pro"

    request = seen[0]
    assert request.url.path == "/v1/subscriptions"
    assert request.url.params["customer"] == "cus_123"
    assert request.url.params["status"] == "active"
    assert request.url.params["limit"] == "1"
    assert request.headers["Authorization"] == "Bearer sk_test_123"


def test_subscription_without_items_has_no_price():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": [{"id": "sub_1", "status": "trialing"}]})

    subscriptions = asyncio.run(_billing(handler).list_active_subscriptions("cus_123"))

    assert subscriptions[0].price_id is None
    assert subscriptions[0].status == "trialing"


def test_error_status_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": {"message": "Invalid API Key"}})

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(_billing(handler).list_active_subscriptions("cus_123"))


def test_billing_client_requires_secret_key(monkeypatch):
    assert get_billing_client() is None

    monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_123")
    get_settings.cache_clear()

    assert isinstance(get_billing_client(), StripeBilling)
