"""Per-user subscription profile."""

from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from checkify.database.base import Base, created_at_column, updated_at_column


class UserProfile(Base):
    """
    Subscription state recorded against a user.

    subscription_tier is stored as free text: billing webhooks write it
    outside this service, so values are validated on read.
    """

    __tablename__ = "user_profiles"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    subscription_tier: Mapped[str | None] = mapped_column(String(32), nullable=True)
    subscription_status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    stripe_customer_id: Mapped[str | None] = mapped_column(
        String(255),
        index=True,
        nullable=True,
    )

    created_at: Mapped[datetime] = created_at_column()
    updated_at: Mapped[datetime] = updated_at_column()
