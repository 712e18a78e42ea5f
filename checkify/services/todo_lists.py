"""Persistence for todo lists, their Notion credentials and user profiles."""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from checkify.database.base import utc_now
from checkify.models.todo_list import TodoList
from checkify.models.user_profile import UserProfile
from checkify.schemas.extraction import ExtractionMetadata, SyncInfo
from checkify.services.errors import ConfigurationError, PersistenceError, TodoListNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TodoListSource:
    """Everything an extraction needs to know about a todo list, read up front."""

    todo_list_id: str
    notion_database_id: str
    access_token: str
    sync_info: SyncInfo


def get_todo_list_source(db: Session, todo_list_id: str, user_id: str) -> TodoListSource:
    """
    Load the Notion database id, access token and sync info for a todo list.

    Raises:
        TodoListNotFoundError: No such list, or it belongs to another user
        ConfigurationError: The list has no Notion database or access token
    """
    if not todo_list_id:
        raise ConfigurationError("No todo_list_id found")

    todo_list = (
        db.query(TodoList)
        .filter(TodoList.todo_list_id == todo_list_id)
        .filter(TodoList.user_id == user_id)
        .first()
    )
    if not todo_list:
        raise TodoListNotFoundError(todo_list_id)

    notion_database = todo_list.notion_database
    if not notion_database:
        raise ConfigurationError(f"Todo list {todo_list_id} has no Notion database")
    if not notion_database.access_token:
        raise ConfigurationError(f"No Notion access token for todo list {todo_list_id}")

    return TodoListSource(
        todo_list_id=todo_list.todo_list_id,
        notion_database_id=notion_database.notion_database_id,
        access_token=notion_database.access_token,
        sync_info=SyncInfo(
            sync_database_id=todo_list.notion_sync_database_id,
            last_sync_date=todo_list.last_sync_date,
        ),
    )


def save_extraction_metadata(
    db: Session,
    todo_list_id: str,
    metadata: ExtractionMetadata,
) -> datetime:
    """
    Record the latest extraction summary against the todo list.

    Returns:
        The extraction timestamp written

    Raises:
        PersistenceError: The list vanished or the write failed
    """
    extracted_at = utc_now()
    try:
        updated = (
            db.query(TodoList)
            .filter(TodoList.todo_list_id == todo_list_id)
            .update(
                {
                    "extraction_metadata": metadata.model_dump(mode="json", by_alias=True),
                    "last_extracted_at": extracted_at,
                },
                synchronize_session=False,
            )
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Failed to save extraction metadata for {todo_list_id}: {e}") from e

    if not updated:
        raise PersistenceError(f"Todo list {todo_list_id} disappeared before metadata was saved")

    logger.debug(f"Saved extraction metadata for todo list {todo_list_id}")
    return extracted_at


def get_user_profile(db: Session, user_id: str) -> UserProfile | None:
    return db.query(UserProfile).filter(UserProfile.user_id == user_id).first()


def update_subscription(db: Session, user_id: str, tier: str, status: str) -> None:
    """Write a reconciled subscription tier back to the user's profile."""
    db.query(UserProfile).filter(UserProfile.user_id == user_id).update(
        {
            "subscription_tier": tier,
            "subscription_status": status,
            "updated_at": utc_now(),
        },
        synchronize_session=False,
    )
    db.commit()
