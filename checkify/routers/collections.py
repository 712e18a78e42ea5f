"""Todo-list collection endpoints: synchronous and streaming extraction."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session, sessionmaker

from checkify.auth.dependencies import get_current_user
from checkify.auth.schemas import User
from checkify.database.session import get_db, get_session_factory
from checkify.dependencies.tiers import get_caller_tier
from checkify.schemas.extraction import TodoListExtraction
from checkify.schemas.tier import TierResolution
from checkify.services.extraction import extract_todo_list, stream_todo_list
from checkify.services.todo_lists import get_todo_list_source
from checkify.utils.sse import SSE_HEADERS, detach_stream

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/collection", tags=["collections"])


@router.get("/{todo_list_id}", response_model=TodoListExtraction)
async def get_collection(
    todo_list_id: str,
    tier: TierResolution = Depends(get_caller_tier),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TodoListExtraction:
    """
    Extract every page with checkboxes from the todo list's Notion database.

    Limits follow the caller's tier. Fails with 502 if the database page
    walk fails; per-page failures are reported in metadata.errors.
    """
    source = get_todo_list_source(db, todo_list_id, user.id)
    return await extract_todo_list(db, source, tier)


@router.get("/{todo_list_id}/stream")
async def stream_collection(
    todo_list_id: str,
    tier: TierResolution = Depends(get_caller_tier),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    session_factory: sessionmaker = Depends(get_session_factory),
) -> StreamingResponse:
    """
    Stream the extraction as Server-Sent Events.

    Each event is `data: <StreamChunk JSON>`; the last one is either a
    `complete` or an `error` chunk. Missing lists and credentials fail
    before the stream opens.
    """
    source = get_todo_list_source(db, todo_list_id, user.id)
    logger.info(
        f"Stream: Using {tier.tier.value} tier from {tier.source.value} for user {user.id}"
    )

    return StreamingResponse(
        detach_stream(stream_todo_list(session_factory, source, tier)),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
