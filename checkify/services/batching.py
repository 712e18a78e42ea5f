"""Batched fan-out of per-page work.

Pages are processed in consecutive fixed-size batches: every page of a batch
runs concurrently, the batch is joined, and a fixed pause separates it from
the next one. Results keep input order, independent of completion order.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from typing import Awaitable, Callable, Generic, TypeVar

from checkify.schemas.extraction import ChildFetchMeta, PageCheckboxes
from checkify.schemas.notion import NotionPage, TodoBlock
from checkify.schemas.tier import TierLimits
from checkify.services.errors import PerParentProcessingError
from checkify.services.notion import NotionClient
from checkify.services.pagination import fetch_all_child_blocks

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

# Processes one page; must not raise for per-page failures
PageProcessor = Callable[[T], Awaitable[R]]


def split_batches(items: Sequence[T], batch_size: int) -> list[list[T]]:
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    return [list(items[i : i + batch_size]) for i in range(0, len(items), batch_size)]


class BatchScheduler(Generic[T, R]):
    """Runs a PageProcessor over items, batch by batch."""

    def __init__(
        self,
        processor: PageProcessor[T, R],
        batch_size: int,
        delay: float = 0.0,
    ):
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.processor = processor
        self.batch_size = batch_size
        self.delay = delay

    async def iter_batches(self, items: Sequence[T]) -> AsyncIterator[tuple[list[T], list[R]]]:
        """Yield (batch, results) per batch; results[i] belongs to batch[i]."""
        batches = split_batches(items, self.batch_size)
        for index, batch in enumerate(batches):
            # gather returns results in argument order, not completion order
            results = await asyncio.gather(*(self.processor(item) for item in batch))
            yield batch, list(results)

            if index + 1 < len(batches):
                await asyncio.sleep(self.delay)

    async def run(self, items: Sequence[T]) -> list[R]:
        """Process every item and return the results in input order."""
        results: list[R] = []
        async for _, batch_results in self.iter_batches(items):
            results.extend(batch_results)
        return results


def make_checkbox_processor(
    notion: NotionClient,
    limits: TierLimits,
) -> PageProcessor[NotionPage, PageCheckboxes]:
    """
    Build the processor that fetches one page's checkboxes.

    A failed child fetch becomes an error on that page's outcome (with no
    checkboxes) instead of an exception, so one bad page never aborts the
    batch.
    """

    async def process(page: NotionPage) -> PageCheckboxes:
        try:
            result = await fetch_all_child_blocks(
                notion,
                page.id,
                limits.max_checkboxes_per_page,
            )
        except Exception as e:
            error = PerParentProcessingError(page.id, e)
            logger.error(str(error))
            return PageCheckboxes(
                page=page,
                checkboxes=[],
                metadata=ChildFetchMeta(total_blocks=0, was_limited=False),
                error=str(error),
            )

        checkboxes = [block for block in result.items if isinstance(block, TodoBlock)]
        return PageCheckboxes(
            page=page,
            checkboxes=checkboxes,
            metadata=ChildFetchMeta(
                total_blocks=result.total_count,
                was_limited=result.was_limited,
            ),
        )

    return process
