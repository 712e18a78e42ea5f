"""Notion objects as consumed by the extraction pipeline."""

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class NotionPage(BaseModel):
    """
    A page row of a Notion database.

    Unknown Notion fields (parent, icon, archived, ...) are kept as-is so the
    page is passed through to clients unchanged.
    """

    id: str
    created_time: datetime | None = None
    last_edited_time: datetime | None = None
    url: str | None = None
    properties: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="allow", frozen=True)


class TodoBlock(BaseModel):
    """A `to_do` block: the checkbox items a todo list is built from."""

    kind: Literal["to_do"] = "to_do"
    id: str
    checked: bool = False
    text: str = ""
    parent_id: str = Field(alias="parentId")
    created_time: datetime | None = Field(default=None, alias="createdTime")
    last_edited_time: datetime | None = Field(default=None, alias="lastEditedTime")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class OtherBlock(BaseModel):
    """Any block kind other than `to_do`; discarded before aggregation."""

    kind: Literal["other"] = "other"
    id: str
    block_type: str = Field(alias="blockType")
    parent_id: str = Field(alias="parentId")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


ChildBlock = Annotated[Union[TodoBlock, OtherBlock], Field(discriminator="kind")]


def _plain_text(rich_text: list[dict[str, Any]] | None) -> str:
    return "".join(part.get("plain_text", "") for part in rich_text or [])


def parse_block(raw: dict[str, Any], parent_id: str) -> TodoBlock | OtherBlock:
    """Turn a raw Notion block object into a closed ChildBlock variant."""
    block_type = raw.get("type", "")
    if block_type == "to_do":
        content = raw.get("to_do") or {}
        return TodoBlock(
            id=raw["id"],
            checked=bool(content.get("checked", False)),
            text=_plain_text(content.get("rich_text")),
            parent_id=parent_id,
            created_time=raw.get("created_time"),
            last_edited_time=raw.get("last_edited_time"),
        )
    return OtherBlock(id=raw["id"], block_type=block_type, parent_id=parent_id)
