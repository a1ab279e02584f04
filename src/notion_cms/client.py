"""Notion CMS Client - Thin wrapper around the Notion API.

Exposes the three remote calls the content pipeline needs: page retrieval,
paginated block children listing and paginated database queries. Errors
from the SDK are not retried or wrapped.
"""

import logging
from typing import Any

from notion_client import Client

from notion_cms.config import get_notion_token

logger = logging.getLogger(__name__)

# Notion API maximum page size
MAX_PAGE_SIZE = 100


class NotionContentClient:
    """Read-only wrapper around notion_client.Client.

    Attributes:
        notion: The underlying notion_client.Client instance.
        request_count: Total number of API requests made.
    """

    def __init__(self, notion: Client):
        """Initialize the client.

        Args:
            notion: A configured notion_client.Client instance.
        """
        self.notion = notion
        self.request_count: int = 0

    def get_page(self, page_id: str) -> dict[str, Any]:
        """Get page metadata.

        Args:
            page_id: The Notion page ID.

        Returns:
            Page object from Notion API.

        Raises:
            APIResponseError: On API errors.
        """
        self.request_count += 1
        logger.debug(f"Retrieving page {page_id}")
        return self.notion.pages.retrieve(page_id=page_id)

    def list_block_children(
        self,
        block_id: str,
        start_cursor: str | None = None,
        page_size: int = MAX_PAGE_SIZE,
    ) -> dict[str, Any]:
        """Get one page of child blocks of a block or page.

        Args:
            block_id: The Notion block or page ID.
            start_cursor: Cursor from a previous response, None for the first page.
            page_size: Number of blocks requested.

        Returns:
            Response dict with ``results``, ``has_more`` and ``next_cursor``.

        Raises:
            APIResponseError: On API errors.
        """
        kwargs: dict[str, Any] = {"block_id": block_id, "page_size": page_size}
        if start_cursor:
            kwargs["start_cursor"] = start_cursor
        self.request_count += 1
        return self.notion.blocks.children.list(**kwargs)

    def query_database(self, database_id: str, **query: Any) -> dict[str, Any]:
        """Query one page of a database.

        Args:
            database_id: The Notion database ID.
            **query: filter, sorts, page_size and start_cursor, as accepted
                by the Notion API. None values are dropped.

        Returns:
            Response dict with ``results``, ``has_more`` and ``next_cursor``.

        Raises:
            APIResponseError: On API errors.
        """
        kwargs = {key: value for key, value in query.items() if value is not None}
        self.request_count += 1
        logger.debug(f"Querying database {database_id} with {sorted(kwargs)}")
        return self.notion.databases.query(database_id=database_id, **kwargs)


def get_notion_client(auth: str | None = None) -> NotionContentClient:
    """Factory function to create a configured NotionContentClient.

    Args:
        auth: Integration token. Read from NOTION_API_TOKEN when omitted.

    Returns:
        A configured NotionContentClient instance.

    Raises:
        ValueError: If no token is given and NOTION_API_TOKEN is not set.
    """
    token = auth or get_notion_token()
    return NotionContentClient(Client(auth=token))
