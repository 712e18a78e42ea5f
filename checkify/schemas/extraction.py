"""Extraction result and stream chunk schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_serializer

from checkify.models.enums import SubscriptionTier, TierSource
from checkify.schemas.notion import NotionPage, TodoBlock


class ChildFetchMeta(BaseModel):
    """How the child walk of one page ended."""

    total_blocks: int = Field(alias="totalBlocks")
    was_limited: bool = Field(alias="wasLimited")

    model_config = ConfigDict(populate_by_name=True)


class PageCheckboxes(BaseModel):
    """
    One page with its checkbox children.

    error is set when the page's child fetch failed; checkboxes is then
    empty. It is reported through ExtractionMetadata.errors, not on the wire.
    """

    page: NotionPage
    checkboxes: list[TodoBlock] = Field(default_factory=list)
    metadata: ChildFetchMeta
    error: str | None = Field(default=None, exclude=True)


class ExtractionLimits(BaseModel):
    tier: SubscriptionTier
    tier_source: TierSource = Field(alias="tierSource")
    max_pages: int = Field(alias="maxPages")
    max_checkboxes_per_page: int = Field(alias="maxCheckboxesPerPage")
    pages_limited: bool = Field(alias="pagesLimited")
    reached_page_limit: bool = Field(alias="reachedPageLimit")

    model_config = ConfigDict(populate_by_name=True)


class ExtractionMetadata(BaseModel):
    """Summary of one extraction, persisted against the todo list."""

    total_pages: int = Field(alias="totalPages")
    total_checkboxes: int = Field(alias="totalCheckboxes")
    pages_with_checkboxes: int = Field(alias="pagesWithCheckboxes")
    extraction_complete: bool = Field(alias="extractionComplete")
    errors: list[str] = Field(default_factory=list)
    limits: ExtractionLimits

    model_config = ConfigDict(populate_by_name=True)


class SyncInfo(BaseModel):
    sync_database_id: str | None = Field(default=None, alias="syncDatabaseId")
    last_sync_date: datetime | None = Field(default=None, alias="lastSyncDate")

    model_config = ConfigDict(populate_by_name=True)


class TodoListExtraction(BaseModel):
    """Schema for the synchronous collection response."""

    pages: list[PageCheckboxes]
    sync_info: SyncInfo = Field(alias="syncInfo")
    metadata: ExtractionMetadata

    model_config = ConfigDict(populate_by_name=True)


# ============================================================
# Stream chunks
# ============================================================


class ProgressPayload(BaseModel):
    total_pages: int = Field(alias="totalPages")
    processed_pages: int = Field(alias="processedPages")
    total_checkboxes: int = Field(alias="totalCheckboxes")
    percent_complete: int | None = Field(default=None, alias="percentComplete")

    model_config = ConfigDict(populate_by_name=True)

    @model_serializer(mode="wrap")
    def _omit_missing_percent(self, handler) -> dict[str, Any]:
        data = handler(self)
        if self.percent_complete is None:
            data.pop("percentComplete", None)
            data.pop("percent_complete", None)
        return data


class DataPayload(BaseModel):
    pages: list[PageCheckboxes]


class MetadataPayload(BaseModel):
    sync_info: SyncInfo = Field(alias="syncInfo")
    metadata: ExtractionMetadata

    model_config = ConfigDict(populate_by_name=True)


class CompletePayload(BaseModel):
    total_pages: int = Field(alias="totalPages")
    total_checkboxes: int = Field(alias="totalCheckboxes")

    model_config = ConfigDict(populate_by_name=True)


class ErrorPayload(BaseModel):
    message: str


ChunkType = Literal["progress", "data", "metadata", "complete", "error"]


class StreamChunk(BaseModel):
    """One SSE message of the progressive delivery protocol."""

    type: ChunkType
    payload: ProgressPayload | DataPayload | MetadataPayload | CompletePayload | ErrorPayload

    @property
    def is_terminal(self) -> bool:
        return self.type in ("complete", "error")

    def to_sse(self) -> str:
        return f"data: {self.model_dump_json(by_alias=True)}\n\n"
