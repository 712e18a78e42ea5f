"""Server-Sent Events helpers."""

import asyncio
import logging
from collections.abc import AsyncIterator

from checkify.schemas.extraction import StreamChunk

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

# Strong references so running producers are not garbage collected
_producers: set[asyncio.Task] = set()


def detach_stream(chunks: AsyncIterator[StreamChunk]) -> AsyncIterator[str]:
    """
    Run a chunk producer in its own task and return the SSE lines it emits.

    The producer is not tied to the consumer: if the client disconnects, the
    returned generator is closed but the producer keeps running to its end
    (so metadata still gets persisted).
    """
    queue: asyncio.Queue[StreamChunk | None] = asyncio.Queue()

    async def produce() -> None:
        try:
            async for chunk in chunks:
                queue.put_nowait(chunk)
        finally:
            queue.put_nowait(None)

    task = asyncio.create_task(produce())
    _producers.add(task)
    task.add_done_callback(_producers.discard)

    async def event_generator() -> AsyncIterator[str]:
        delivered = 0
        try:
            while True:
                chunk = await queue.get()
                if chunk is None:
                    break
                yield chunk.to_sse()
                delivered += 1
        except (asyncio.CancelledError, GeneratorExit):
            logger.warning(
                f"Stream consumer went away after {delivered} chunks; extraction continues"
            )
            raise

    return event_generator()
