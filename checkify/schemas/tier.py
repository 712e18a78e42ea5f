"""Subscription tier schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from checkify.models.enums import SubscriptionTier, TierSource


class TierLimits(BaseModel):
    """Numeric caps applied to one extraction for a tier."""

    max_pages: int = Field(..., gt=0, alias="maxPages")
    max_checkboxes_per_page: int = Field(..., gt=0, alias="maxCheckboxesPerPage")
    max_todo_lists: int = Field(..., gt=0, alias="maxTodoLists")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class TierResolution(BaseModel):
    """A caller's effective tier, where it came from, and its limits."""

    tier: SubscriptionTier
    status: str = "active"
    source: TierSource
    billing_customer_id: str | None = Field(default=None, alias="stripeCustomerId")
    limits: TierLimits

    model_config = ConfigDict(populate_by_name=True)


class TierEntry(BaseModel):
    tier: SubscriptionTier
    limits: TierLimits


class TierTableResponse(BaseModel):
    """Schema for the static tier table."""

    tiers: list[TierEntry]


class MyTierResponse(BaseModel):
    """Debug view of the caller's tier next to the persisted profile fields."""

    user_id: str = Field(alias="userId")
    email: str | None = None
    tier: TierResolution
    raw_profile: dict[str, Any] | None = Field(default=None, alias="rawDatabaseData")
    message: str

    model_config = ConfigDict(populate_by_name=True)
