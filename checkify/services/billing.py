"""Stripe billing lookups.

Only one read is needed here: the active subscriptions of a customer, used
to reconcile a profile whose persisted tier lags behind Stripe (e.g. a
missed webhook).
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from checkify.config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActiveSubscription:
    subscription_id: str
    status: str
    price_id: str | None


class StripeBilling:
    """Read-only client for Stripe subscriptions."""

    def __init__(
        self,
        secret_key: str,
        *,
        api_base: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._secret_key = secret_key
        self._api_base = api_base or get_settings().stripe_api_base
        self._transport = transport

    async def list_active_subscriptions(
        self,
        customer_id: str,
        limit: int = 1,
    ) -> list[ActiveSubscription]:
        """
        List a customer's active subscriptions.

        Raises:
            httpx.HTTPError: On network error or non-2xx response
        """
        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.get(
                f"{self._api_base}/subscriptions",
                params={"customer": customer_id, "status": "active", "limit": limit},
                headers={"Authorization": f"Bearer {self._secret_key}"},
                timeout=30.0,
            )
            response.raise_for_status()
            payload: dict[str, Any] = response.json()

        return [_to_subscription(item) for item in payload.get("data", [])]


def _to_subscription(item: dict[str, Any]) -> ActiveSubscription:
    line_items = (item.get("items") or {}).get("data") or []
    price_id = None
    if line_items:
        price_id = (line_items[0].get("price") or {}).get("id")
    return ActiveSubscription(
        subscription_id=item.get("id", ""),
        status=item.get("status", "active"),
        price_id=price_id,
    )


def get_billing_client() -> StripeBilling | None:
    """Build a billing client, or None when Stripe is not configured."""
    settings = get_settings()
    if not settings.billing_enabled:
        return None
    return StripeBilling(settings.stripe_secret_key)
