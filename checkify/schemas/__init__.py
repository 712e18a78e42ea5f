"""Pydantic schemas for API request/response validation."""

from checkify.schemas.common import CursorPage, PaginationResult
from checkify.schemas.extraction import (
    ChildFetchMeta,
    ExtractionLimits,
    ExtractionMetadata,
    PageCheckboxes,
    StreamChunk,
    SyncInfo,
    TodoListExtraction,
)
from checkify.schemas.notion import NotionPage, OtherBlock, TodoBlock, parse_block
from checkify.schemas.tier import TierLimits, TierResolution

__all__ = [
    "CursorPage",
    "PaginationResult",
    "ChildFetchMeta",
    "ExtractionLimits",
    "ExtractionMetadata",
    "PageCheckboxes",
    "StreamChunk",
    "SyncInfo",
    "TodoListExtraction",
    "NotionPage",
    "OtherBlock",
    "TodoBlock",
    "parse_block",
    "TierLimits",
    "TierResolution",
]
