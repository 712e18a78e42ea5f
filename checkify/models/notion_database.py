from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from checkify.database.base import Base, created_at_column

if TYPE_CHECKING:
    from checkify.models.todo_list import TodoList


class NotionDatabase(Base):
    """
    A connected Notion database and the access token used to read it.

    Access: Direct via user_id.
    """

    __tablename__ = "notion_database"

    notion_database_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str | None] = mapped_column(String(255), index=True, nullable=True)
    access_token: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = created_at_column()

    todo_lists: Mapped[list["TodoList"]] = relationship(
        "TodoList",
        back_populates="notion_database",
    )
