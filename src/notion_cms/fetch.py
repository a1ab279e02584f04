"""Block fetching operations.

Retrieves the block tree of a page level by level, following pagination
cursors, and normalizes it into ContentBlock nodes. Fetching is strictly
sequential: siblings and pages are requested one at a time, in order.
"""

import logging
from typing import TYPE_CHECKING

from notion_cms.extract import extract_block_content, extract_block_metadata
from notion_cms.models import ContentBlock

if TYPE_CHECKING:
    from notion_cms.client import NotionContentClient

logger = logging.getLogger(__name__)


def fetch_all_blocks(
    client: "NotionContentClient", block_id: str, page_size: int = 100
) -> list[dict]:
    """Fetch every child block of a page or block (one level only).

    Follows ``next_cursor`` until the API stops returning one.

    Args:
        client: NotionContentClient instance.
        block_id: Notion page or block ID.
        page_size: Blocks requested per API call.

    Returns:
        List of raw block dicts in API order.

    Raises:
        APIResponseError: If any page of results cannot be fetched.
    """
    blocks: list[dict] = []
    cursor: str | None = None

    while True:
        response = client.list_block_children(block_id, start_cursor=cursor, page_size=page_size)
        blocks.extend(response.get("results", []))
        cursor = response.get("next_cursor")
        if not cursor:
            break

    logger.debug(f"Fetched {len(blocks)} child blocks of {block_id}")
    return blocks


def build_tree(
    client: "NotionContentClient", blocks: list[dict], depth: int = 0
) -> tuple[ContentBlock, ...]:
    """Normalize raw blocks, fetching children for blocks that have them.

    Args:
        client: NotionContentClient instance.
        blocks: Raw block dicts from the Notion API.
        depth: Nesting level, used for log indentation.

    Returns:
        Tuple of ContentBlock in the same order as ``blocks``.

    Raises:
        APIResponseError: If fetching any descendant fails. No partial
            tree is returned.
    """
    result = []

    for block in blocks:
        block_id = block.get("id", "")
        block_type = block.get("type", "unknown")

        children = None
        if block.get("has_children", False):
            logger.debug(f"{'  ' * depth}Fetching children for {block_type} block {block_id}")
            children = build_tree(client, fetch_all_blocks(client, block_id), depth + 1)

        result.append(
            ContentBlock(
                id=block_id,
                type=block_type,
                content=extract_block_content(block),
                children=children,
                metadata=extract_block_metadata(block),
            )
        )

    return tuple(result)


def count_blocks(blocks: tuple[ContentBlock, ...]) -> int:
    """Count blocks in a tree, including nested children."""
    total = len(blocks)
    for block in blocks:
        if block.children:
            total += count_blocks(block.children)
    return total


def fetch_block_tree(client: "NotionContentClient", page_id: str) -> tuple[ContentBlock, ...]:
    """Fetch and normalize the full block tree of a page.

    Args:
        client: NotionContentClient instance.
        page_id: Notion page ID.

    Returns:
        Top-level ContentBlock nodes with nested children.
    """
    logger.debug(f"Fetching blocks recursively for page {page_id}")

    tree = build_tree(client, fetch_all_blocks(client, page_id))

    logger.info(f"Fetched {count_blocks(tree)} total blocks (including nested) for page {page_id}")
    return tree
