"""Shared pytest fixtures and helpers.

Tests run against an in-memory stand-in for the Notion API, so no token or
network access is needed.
"""

import logging
from typing import Any

import pytest

from notion_cms import CMSConfig, CacheConfig, NotionCMS

logger = logging.getLogger(__name__)


# Helper functions for creating API-shaped objects


def rich_text(text: str) -> list[dict[str, Any]]:
    """Build a rich_text array the way the API returns it."""
    return [{"type": "text", "text": {"content": text}, "plain_text": text}]


def make_block(
    block_id: str,
    block_type: str,
    text: str | None = None,
    has_children: bool = False,
    **payload: Any,
) -> dict[str, Any]:
    """Build a raw block as returned by blocks.children.list."""
    data = dict(payload)
    if text is not None:
        data["rich_text"] = rich_text(text)
    return {
        "object": "block",
        "id": block_id,
        "type": block_type,
        "has_children": has_children,
        block_type: data,
    }


def make_page(page_id: str, title: str, title_property: str = "Name", **properties: Any) -> dict[str, Any]:
    """Build a page object with a title property and extra properties."""
    props = {title_property: {"id": "title", "type": "title", "title": rich_text(title)}}
    props.update(properties)
    return {
        "object": "page",
        "id": page_id,
        "created_time": "2024-01-01T00:00:00.000Z",
        "last_edited_time": "2024-01-02T00:00:00.000Z",
        "properties": props,
    }


def _paginate(items: list, start_cursor: str | None, page_size: int, prefix: str) -> dict[str, Any]:
    start = int(start_cursor[len(prefix):]) if start_cursor else 0
    end = start + page_size
    has_more = end < len(items)
    return {
        "object": "list",
        "results": items[start:end],
        "has_more": has_more,
        "next_cursor": f"{prefix}{end}" if has_more else None,
    }


class FakeNotionClient:
    """In-memory replacement for NotionContentClient.

    Attributes:
        pages: page_id -> page object.
        children: block or page ID -> list of raw child blocks.
        databases: database_id -> list of page objects.
        calls: Every call made, as (method, args) tuples.
    """

    def __init__(self, page_size: int = 100):
        self.page_size = page_size
        self.pages: dict[str, dict] = {}
        self.children: dict[str, list[dict]] = {}
        self.databases: dict[str, list[dict]] = {}
        self.calls: list[tuple[str, Any]] = []
        self.failing: set[str] = set()

    def get_page(self, page_id: str) -> dict[str, Any]:
        self.calls.append(("get_page", page_id))
        return self.pages[page_id]

    def list_block_children(self, block_id: str, start_cursor: str | None = None, page_size: int = 100) -> dict[str, Any]:
        self.calls.append(("list_block_children", (block_id, start_cursor)))
        if block_id in self.failing:
            raise RuntimeError(f"fetch failed for {block_id}")
        size = min(page_size, self.page_size)
        return _paginate(self.children.get(block_id, []), start_cursor, size, "b")

    def query_database(self, database_id: str, **query: Any) -> dict[str, Any]:
        self.calls.append(("query_database", (database_id, query)))
        results = self.databases[database_id]
        query_filter = query.get("filter")
        if query_filter and query_filter.get("property") == "Slug":
            wanted = query_filter["rich_text"]["equals"]
            results = [
                page for page in results
                if "".join(run["plain_text"] for run in page["properties"].get("Slug", {}).get("rich_text", [])) == wanted
            ]
        size = min(query.get("page_size", 100), self.page_size)
        return _paginate(results, query.get("start_cursor"), size, "c")

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)


@pytest.fixture
def fake_client():
    """Empty fake Notion client."""
    return FakeNotionClient()


@pytest.fixture
def make_cms(fake_client):
    """Factory building a NotionCMS backed by the fake client."""

    def _make(database_id: str | None = "db1", cache: bool = True, ttl: int = 300) -> NotionCMS:
        config = CMSConfig(auth="secret_test", database_id=database_id, cache=CacheConfig(enabled=cache, ttl=ttl))
        return NotionCMS(config, client=fake_client)

    return _make
