from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from checkify.database.base import Base, created_at_column, updated_at_column

if TYPE_CHECKING:
    from checkify.models.notion_database import NotionDatabase


class TodoList(Base):
    """
    A todo list backed by one Notion database.

    extraction_metadata holds the summary of the most recent extraction;
    last_sync_date is maintained by the sync-to-Notion flow.
    """

    __tablename__ = "todo_list"

    todo_list_id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    notion_database_id: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("notion_database.notion_database_id", ondelete="SET NULL"),
        nullable=True,
    )
    notion_sync_database_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    last_sync_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    extraction_metadata: Mapped[dict[str, Any] | None] = mapped_column(nullable=True)
    last_extracted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    created_at: Mapped[datetime] = created_at_column()
    updated_at: Mapped[datetime] = updated_at_column()

    notion_database: Mapped["NotionDatabase"] = relationship(
        "NotionDatabase",
        back_populates="todo_lists",
    )
