"""Cursor pagination over Notion list endpoints.

Every list walk goes through paginate(): pages are requested with the
cursor of the previous response, sized so the walk never overshoots its
cap, with a fixed pause between requests to stay under Notion's rate limit.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from checkify.config import get_settings
from checkify.schemas.common import CursorPage, PaginationResult
from checkify.schemas.notion import ChildBlock, NotionPage, parse_block
from checkify.services.errors import UpstreamFetchError
from checkify.services.notion import NotionClient
from checkify.utils.retry import with_retry

logger = logging.getLogger(__name__)

T = TypeVar("T")

# (page_size, cursor) -> one page of items
PageFetcher = Callable[[int, str | None], Awaitable[CursorPage[T]]]


async def paginate(
    fetch_page: PageFetcher,
    *,
    endpoint: str,
    resource_id: str,
    max_items: int | None = None,
    page_cap: int | None = None,
    delay: float | None = None,
) -> PaginationResult[T]:
    """
    Walk a cursor-paginated list until upstream is exhausted or max_items is reached.

    Args:
        fetch_page: Fetches one page given a page size and the previous cursor
        endpoint: Endpoint name, used in errors and logs
        resource_id: Database or block id being listed
        max_items: Cap on collected items; None walks to exhaustion
        page_cap: Largest page size upstream accepts (settings.notion_page_size)
        delay: Seconds to wait between page requests (settings.notion_request_delay_seconds)

    Raises:
        UpstreamFetchError: The first failed page request, after any configured retries
        ValueError: max_items is not positive
    """
    if max_items is not None and max_items <= 0:
        raise ValueError(f"max_items must be positive, got {max_items}")

    settings = get_settings()
    page_cap = page_cap or settings.notion_page_size
    delay = settings.notion_request_delay_seconds if delay is None else delay

    items: list[T] = []
    has_more = True
    cursor: str | None = None
    was_limited = False

    while has_more:
        if max_items is not None and len(items) >= max_items:
            was_limited = True
            break

        page_size = page_cap if max_items is None else min(page_cap, max_items - len(items))
        try:
            page = await with_retry(
                fetch_page,
                page_size,
                cursor,
                max_attempts=settings.upstream_max_attempts,
                base_delay=settings.upstream_retry_base_delay,
            )
        except Exception as e:
            logger.error(f"Error fetching {endpoint} for {resource_id}: {e}")
            raise UpstreamFetchError(endpoint, resource_id, e) from e

        items.extend(page.items)
        has_more = page.has_more
        cursor = page.next_cursor

        if has_more and not cursor:
            logger.warning(f"{endpoint} for {resource_id} reported more results without a cursor")
            break

        if has_more:
            await asyncio.sleep(delay)

    return PaginationResult(items=items, total_count=len(items), was_limited=was_limited)


async def fetch_all_database_pages(
    notion: NotionClient,
    database_id: str,
    max_pages: int | None = None,
) -> PaginationResult[NotionPage]:
    """Fetch the pages of a Notion database, most recently edited first."""

    async def fetch_page(page_size: int, cursor: str | None) -> CursorPage[NotionPage]:
        response = await notion.query_database(database_id, page_size, cursor)
        return CursorPage[NotionPage](
            items=[NotionPage.model_validate(raw) for raw in response.get("results", [])],
            has_more=response.get("has_more", False),
            next_cursor=response.get("next_cursor"),
        )

    return await paginate(
        fetch_page,
        endpoint="databases.query",
        resource_id=database_id,
        max_items=max_pages,
    )


async def fetch_all_child_blocks(
    notion: NotionClient,
    block_id: str,
    max_blocks: int | None = None,
) -> PaginationResult[ChildBlock]:
    """
    Fetch the child blocks of a page.

    Partial block objects (no "type") are skipped and do not count toward
    the cap's collected total.
    """

    async def fetch_page(
        page_size: int, cursor: str | None
    ) -> CursorPage[ChildBlock]:
        response = await notion.list_block_children(block_id, page_size, cursor)
        return CursorPage[ChildBlock](
            items=[
                parse_block(raw, block_id)
                for raw in response.get("results", [])
                if "type" in raw
            ],
            has_more=response.get("has_more", False),
            next_cursor=response.get("next_cursor"),
        )

    return await paginate(
        fetch_page,
        endpoint="blocks.children.list",
        resource_id=block_id,
        max_items=max_blocks,
    )
