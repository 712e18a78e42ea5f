"""Tests for cursor pagination over Notion list endpoints."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from checkify.schemas.common import CursorPage
from checkify.schemas.notion import OtherBlock, TodoBlock
from checkify.services import pagination
from checkify.services.errors import UpstreamFetchError
from checkify.services.pagination import (
    fetch_all_child_blocks,
    fetch_all_database_pages,
    paginate,
)
from tests.notion_fakes import FakeNotion, make_page, make_paragraph, make_todo, make_todos


def _pages(count: int) -> list[dict]:
    return [make_page(f"page-{i}") for i in range(count)]


class TestPaginate:
    """Generic cursor walk."""

    def test_walks_until_upstream_exhausted_without_cap(self):
        notion = FakeNotion(pages=_pages(250))

        result = asyncio.run(fetch_all_database_pages(notion, "db-1"))

        assert result.total_count == 250
        assert result.was_limited is False
        assert [size for size, _ in notion.database_calls] == [100, 100, 100]
        assert [cursor for _, cursor in notion.database_calls] == [None, "100", "200"]

    def test_page_size_shrinks_to_remaining_cap(self):
        notion = FakeNotion(pages=_pages(250))

        result = asyncio.run(fetch_all_database_pages(notion, "db-1", max_pages=130))

        assert result.total_count == 130
        assert result.was_limited is True
        assert [size for size, _ in notion.database_calls] == [100, 30]

    def test_cap_equal_to_upstream_size_is_not_limited(self):
        notion = FakeNotion(pages=_pages(25))

        result = asyncio.run(fetch_all_database_pages(notion, "db-1", max_pages=25))

        assert result.total_count == 25
        assert result.was_limited is False
        assert len(notion.database_calls) == 1

    def test_cap_below_upstream_size_is_limited(self):
        notion = FakeNotion(pages=_pages(26))

        result = asyncio.run(fetch_all_database_pages(notion, "db-1", max_pages=25))

        assert result.total_count == 25
        assert result.was_limited is True
        assert len(notion.database_calls) == 1

    def test_items_keep_upstream_order(self):
        notion = FakeNotion(pages=_pages(7))

        result = asyncio.run(_paginate_in_steps_of_three(notion))

        assert [page["id"] for page in result.items] == [f"page-{i}" for i in range(7)]

    def test_failure_raises_upstream_fetch_error_without_retry(self):
        notion = FakeNotion(pages=_pages(150), fail_database_after=1)

        with pytest.raises(UpstreamFetchError) as exc_info:
            asyncio.run(fetch_all_database_pages(notion, "db-1"))

        assert exc_info.value.endpoint == "databases.query"
        assert exc_info.value.resource_id == "db-1"
        assert isinstance(exc_info.value.cause, httpx.ReadTimeout)
        assert len(notion.database_calls) == 2

    def test_sleeps_only_between_requests(self, monkeypatch):
        delays: list[float] = []

        async def _fake_sleep(seconds: float) -> None:
            delays.append(seconds)

        monkeypatch.setattr(pagination.asyncio, "sleep", _fake_sleep)
        notion = FakeNotion(pages=_pages(250))

        asyncio.run(
            paginate(
                _database_fetcher(notion),
                endpoint="databases.query",
                resource_id="db-1",
                delay=0.1,
            )
        )

        assert delays == [0.1, 0.1]

    def test_rejects_non_positive_cap(self):
        async def _never_called(page_size, cursor):
            raise AssertionError("should not fetch")

        with pytest.raises(ValueError):
            asyncio.run(
                paginate(_never_called, endpoint="x", resource_id="y", max_items=0)
            )

    def test_stops_when_more_reported_without_cursor(self):
        calls = []

        async def _broken_fetch(page_size, cursor):
            calls.append(cursor)
            return CursorPage[int](items=[1, 2], has_more=True, next_cursor=None)

        result = asyncio.run(paginate(_broken_fetch, endpoint="x", resource_id="y"))

        assert result.items == [1, 2]
        assert calls == [None]


class TestFetchAllChildBlocks:
    """Child walk for a single page."""

    def test_parses_blocks_into_variants(self):
        notion = FakeNotion(
            blocks={
                "page-1": [
                    make_todo("t-1", text="Buy milk", checked=True),
                    make_paragraph("p-1", text="notes"),
                    {"object": "block", "id": "partial-1"},
                ]
            }
        )

        result = asyncio.run(fetch_all_child_blocks(notion, "page-1"))

        assert result.total_count == 2
        todo, other = result.items
        assert isinstance(todo, TodoBlock)
        assert todo.text == "Buy milk"
        assert todo.checked is True
        assert todo.parent_id == "page-1"
        assert isinstance(other, OtherBlock)
        assert other.block_type == "paragraph"

    def test_thirty_children_capped_at_twenty_five(self):
        notion = FakeNotion(blocks={"page-c": make_todos("c", 30)})

        result = asyncio.run(fetch_all_child_blocks(notion, "page-c", max_blocks=25))

        assert result.total_count == 25
        assert result.was_limited is True
        assert notion.child_calls == [("page-c", 25, None)]

    def test_child_failure_names_block_endpoint(self):
        notion = FakeNotion(fail_children={"page-x"})

        with pytest.raises(UpstreamFetchError) as exc_info:
            asyncio.run(fetch_all_child_blocks(notion, "page-x"))

        assert exc_info.value.endpoint == "blocks.children.list"
        assert "page-x" in str(exc_info.value)


def _database_fetcher(notion: FakeNotion):
    async def fetch_page(page_size, cursor):
        response = await notion.query_database("db-1", page_size, cursor)
        return CursorPage[dict](
            items=response["results"],
            has_more=response["has_more"],
            next_cursor=response["next_cursor"],
        )

    return fetch_page


async def _paginate_in_steps_of_three(notion: FakeNotion):
    return await paginate(
        _database_fetcher(notion),
        endpoint="databases.query",
        resource_id="db-1",
        page_cap=3,
    )
