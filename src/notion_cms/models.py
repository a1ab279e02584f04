"""Data types for normalized Notion content.

Block and property kinds are closed enums. A block whose type is not listed
keeps its raw type string and reports ``kind`` as None, so renderers can fall
back to a generic rendering instead of failing.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class BlockType(str, Enum):
    """Block types the renderers know how to handle."""

    PARAGRAPH = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    TO_DO = "to_do"
    TOGGLE = "toggle"
    CODE = "code"
    QUOTE = "quote"
    CALLOUT = "callout"
    DIVIDER = "divider"
    IMAGE = "image"
    VIDEO = "video"
    EMBED = "embed"
    BOOKMARK = "bookmark"
    FILE = "file"
    TABLE = "table"
    TABLE_ROW = "table_row"

    @classmethod
    def parse(cls, tag: str | None) -> "BlockType | None":
        """Return the member for ``tag``, or None if the type is unknown."""
        try:
            return cls(tag)
        except ValueError:
            return None


class PropertyType(str, Enum):
    """Page property types with a dedicated extraction rule."""

    TITLE = "title"
    RICH_TEXT = "rich_text"
    NUMBER = "number"
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    DATE = "date"
    CHECKBOX = "checkbox"
    URL = "url"
    EMAIL = "email"
    PHONE_NUMBER = "phone_number"
    FILES = "files"
    RELATION = "relation"
    FORMULA = "formula"
    ROLLUP = "rollup"
    CREATED_TIME = "created_time"
    LAST_EDITED_TIME = "last_edited_time"
    CREATED_BY = "created_by"
    LAST_EDITED_BY = "last_edited_by"
    STATUS = "status"

    @classmethod
    def parse(cls, tag: str | None) -> "PropertyType | None":
        """Return the member for ``tag``, or None if the type is unknown."""
        try:
            return cls(tag)
        except ValueError:
            return None


@dataclass(frozen=True)
class ContentBlock:
    """One node of a normalized block tree.

    ``children`` is None when the source block has no descendants. It is
    never an empty tuple standing in for "no children".
    """

    id: str
    type: str
    content: str = ""
    children: tuple["ContentBlock", ...] | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> BlockType | None:
        return BlockType.parse(self.type)


@dataclass(frozen=True)
class PageContent:
    """A fully resolved page: properties, block tree and both renderings."""

    id: str
    title: str
    properties: dict[str, Any]
    content: tuple[ContentBlock, ...]
    html: str
    markdown: str
    last_edited: str | None = None
    created_time: str | None = None


@dataclass(frozen=True)
class CMSPage:
    """A database entry as listed by a query (no block tree)."""

    id: str
    slug: str
    title: str
    properties: dict[str, Any]
    content: PageContent | None = None


@dataclass(frozen=True)
class CMSCollection:
    """One page of database query results."""

    pages: tuple[CMSPage, ...]
    has_more: bool = False
    next_cursor: str | None = None


@dataclass
class DatabaseQueryOptions:
    """Options for a single database query.

    Attributes:
        filter: Notion filter object.
        sorts: List of Notion sort objects.
        page_size: Number of results requested (Notion caps this at 100).
        start_cursor: Cursor returned by a previous query.
    """

    filter: dict[str, Any] | None = None
    sorts: list[dict[str, Any]] | None = None
    page_size: int = 100
    start_cursor: str | None = None

    def to_query(self) -> dict[str, Any]:
        """Build database query kwargs, leaving out unset values."""
        query: dict[str, Any] = {"page_size": self.page_size}
        if self.filter is not None:
            query["filter"] = self.filter
        if self.sorts is not None:
            query["sorts"] = self.sorts
        if self.start_cursor:
            query["start_cursor"] = self.start_cursor
        return query

    def cache_key(self) -> str:
        """Stable serialization of these options for use in a cache key."""
        return json.dumps(
            {
                "filter": self.filter,
                "sorts": self.sorts,
                "page_size": self.page_size,
                "start_cursor": self.start_cursor,
            },
            sort_keys=True,
            separators=(",", ":"),
        )
