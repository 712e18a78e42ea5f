"""Todo-list extraction: synchronous and streaming delivery.

Both modes run the same pipeline:

    database pages (capped by tier)
      -> batches of pages, each page's checkboxes fetched concurrently
      -> tally of kept pages, checkbox counts and per-page errors
      -> metadata persisted against the todo list (best effort)

The synchronous mode returns everything at once. The streaming mode emits
StreamChunks as batches finish:

    progress(0) -> [data?, progress]* per batch -> metadata -> complete

Any failure along the way ends the stream with a single error chunk instead.
"""

import logging
from collections.abc import AsyncIterator
from enum import Enum

from sqlalchemy.orm import Session, sessionmaker

from checkify.config import get_settings
from checkify.schemas.extraction import (
    CompletePayload,
    DataPayload,
    ErrorPayload,
    ExtractionMetadata,
    MetadataPayload,
    ProgressPayload,
    StreamChunk,
    TodoListExtraction,
)
from checkify.schemas.tier import TierResolution
from checkify.services.aggregation import ExtractionTally, aggregate
from checkify.services.batching import BatchScheduler, make_checkbox_processor
from checkify.services.notion import NotionClient
from checkify.services.pagination import fetch_all_database_pages
from checkify.services.todo_lists import TodoListSource, save_extraction_metadata

logger = logging.getLogger(__name__)


def _persist_metadata(db: Session, todo_list_id: str, metadata: ExtractionMetadata) -> None:
    """Save metadata; failures are logged and never reach the caller."""
    try:
        save_extraction_metadata(db, todo_list_id, metadata)
    except Exception as e:
        logger.error(f"Failed to persist extraction metadata for {todo_list_id}: {e}", exc_info=True)


async def extract_todo_list(
    db: Session,
    source: TodoListSource,
    tier: TierResolution,
) -> TodoListExtraction:
    """
    Extract a todo list in one go.

    Raises:
        UpstreamFetchError: The database page walk failed
    """
    settings = get_settings()

    async with NotionClient(source.access_token) as notion:
        page_result = await fetch_all_database_pages(
            notion,
            source.notion_database_id,
            tier.limits.max_pages,
        )
        logger.info(f"Fetched {page_result.total_count} pages from database")

        scheduler = BatchScheduler(
            make_checkbox_processor(notion, tier.limits),
            batch_size=settings.sync_batch_size,
            delay=settings.sync_batch_delay_seconds,
        )
        outcomes = await scheduler.run(page_result.items)

    pages, metadata = aggregate(outcomes, page_result, tier)
    _persist_metadata(db, source.todo_list_id, metadata)

    logger.info(
        f"Extracted {metadata.total_checkboxes} checkboxes from "
        f"{metadata.pages_with_checkboxes}/{metadata.total_pages} pages"
    )
    return TodoListExtraction(pages=pages, sync_info=source.sync_info, metadata=metadata)


class StreamState(str, Enum):
    """Lifecycle of one streaming extraction."""

    INIT = "init"
    FETCHING_PAGES = "fetching_pages"
    STREAMING_BATCHES = "streaming_batches"
    FINALIZING = "finalizing"
    COMPLETE = "complete"
    ERROR = "error"


TERMINAL_STATES = frozenset({StreamState.COMPLETE, StreamState.ERROR})


class TodoListStream:
    """
    Produces the chunk sequence for one streaming extraction.

    The stream runs detached from the request, so it opens its own session
    from session_factory for the final metadata write.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        source: TodoListSource,
        tier: TierResolution,
    ):
        self.session_factory = session_factory
        self.source = source
        self.tier = tier
        self.state = StreamState.INIT

    def _transition(self, state: StreamState) -> None:
        logger.debug(f"Stream {self.source.todo_list_id}: {self.state.value} -> {state.value}")
        self.state = state

    async def chunks(self) -> AsyncIterator[StreamChunk]:
        """Yield every chunk of the stream; the last one is always complete or error."""
        try:
            async for chunk in self._run():
                yield chunk
        except Exception as e:
            if self.state in TERMINAL_STATES:
                logger.error(f"Stream: failure after {self.state.value}: {e}", exc_info=True)
                return
            logger.error(f"Stream: Failed to fetch todo list: {e}", exc_info=True)
            self._transition(StreamState.ERROR)
            yield StreamChunk(
                type="error",
                payload=ErrorPayload(message=f"Failed to fetch todo list: {e}"),
            )

    async def _run(self) -> AsyncIterator[StreamChunk]:
        settings = get_settings()
        limits = self.tier.limits

        self._transition(StreamState.FETCHING_PAGES)
        yield StreamChunk(
            type="progress",
            payload=ProgressPayload(total_pages=0, processed_pages=0, total_checkboxes=0),
        )

        async with NotionClient(self.source.access_token) as notion:
            page_result = await fetch_all_database_pages(
                notion,
                self.source.notion_database_id,
                limits.max_pages,
            )
            logger.info(f"Stream: Fetched {page_result.total_count} pages from database")

            self._transition(StreamState.STREAMING_BATCHES)
            tally = ExtractionTally(total_pages=page_result.total_count)
            scheduler = BatchScheduler(
                make_checkbox_processor(notion, limits),
                batch_size=settings.stream_batch_size,
                delay=settings.stream_batch_delay_seconds,
            )
            async for _, outcomes in scheduler.iter_batches(page_result.items):
                kept = tally.add(outcomes)
                if kept:
                    yield StreamChunk(type="data", payload=DataPayload(pages=kept))
                yield StreamChunk(
                    type="progress",
                    payload=ProgressPayload(
                        total_pages=tally.total_pages,
                        processed_pages=tally.processed_pages,
                        total_checkboxes=tally.total_checkboxes,
                        percent_complete=tally.percent_complete,
                    ),
                )

        self._transition(StreamState.FINALIZING)
        metadata = tally.metadata(page_result, self.tier)
        with self.session_factory() as db:
            _persist_metadata(db, self.source.todo_list_id, metadata)
        yield StreamChunk(
            type="metadata",
            payload=MetadataPayload(sync_info=self.source.sync_info, metadata=metadata),
        )

        self._transition(StreamState.COMPLETE)
        yield StreamChunk(
            type="complete",
            payload=CompletePayload(
                total_pages=tally.total_pages,
                total_checkboxes=tally.total_checkboxes,
            ),
        )
        logger.info(
            f"Stream: Completed streaming {tally.total_pages} pages "
            f"with {tally.total_checkboxes} checkboxes"
        )


def stream_todo_list(
    session_factory: sessionmaker,
    source: TodoListSource,
    tier: TierResolution,
) -> AsyncIterator[StreamChunk]:
    return TodoListStream(session_factory, source, tier).chunks()
