"""Notion API integration.

A NotionClient is built per request from the todo list's access token and
shared read-only by every page and child walk of that request. Only the two
list endpoints the extraction needs are wrapped:

- POST /databases/{id}/query      pages of a database, newest edit first
- GET  /blocks/{id}/children      child blocks of a page
"""

import logging
from typing import Any

import httpx

from checkify.config import get_settings

logger = logging.getLogger(__name__)


class NotionClient:
    """Thin async wrapper over the Notion REST API."""

    def __init__(
        self,
        access_token: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self._client = httpx.AsyncClient(
            base_url=settings.notion_api_base,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Notion-Version": settings.notion_version,
                "Content-Type": "application/json",
            },
            timeout=settings.notion_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "NotionClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def query_database(
        self,
        database_id: str,
        page_size: int,
        start_cursor: str | None = None,
    ) -> dict[str, Any]:
        """
        Query one page of rows from a Notion database.

        Returns:
            Notion list object: {results, has_more, next_cursor}

        Raises:
            httpx.HTTPError: On network error or non-2xx response
        """
        body: dict[str, Any] = {
            "page_size": page_size,
            "sorts": [{"timestamp": "last_edited_time", "direction": "descending"}],
        }
        if start_cursor:
            body["start_cursor"] = start_cursor

        response = await self._client.post(f"/databases/{database_id}/query", json=body)
        response.raise_for_status()
        return response.json()

    async def list_block_children(
        self,
        block_id: str,
        page_size: int,
        start_cursor: str | None = None,
    ) -> dict[str, Any]:
        """
        List one page of child blocks of a block or page.

        Raises:
            httpx.HTTPError: On network error or non-2xx response
        """
        params: dict[str, Any] = {"page_size": page_size}
        if start_cursor:
            params["start_cursor"] = start_cursor

        response = await self._client.get(f"/blocks/{block_id}/children", params=params)
        response.raise_for_status()
        return response.json()
