"""Extraction of plain values from Notion API objects.

Converts rich text arrays, page properties and block payloads into plain
Python scalars and structures. All functions are pure and never raise on
unexpected shapes: missing data degrades to empty values.
"""

import logging
import re
from typing import Any

from notion_cms.models import PropertyType

logger = logging.getLogger(__name__)

SLUG_PROPERTY = "Slug"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def extract_rich_text(rich_text: Any) -> str:
    """Extract plain text from a Notion rich_text array.

    Works with both Notion API runs (plain_text) and locally built runs
    (text.content).

    Args:
        rich_text: List of rich_text objects. Anything that is not a list
            yields an empty string.

    Returns:
        Concatenated plain text from all runs, in order.
    """
    if not isinstance(rich_text, list):
        return ""
    texts = []
    for item in rich_text:
        if not isinstance(item, dict):
            continue
        # Notion API format: has plain_text
        if "plain_text" in item:
            texts.append(item["plain_text"] or "")
        # Local format: has text.content
        elif "content" in (item.get("text") or {}):
            texts.append(item["text"]["content"] or "")
    return "".join(texts)


def _file_url(obj: dict | None) -> str | None:
    """Return the URL of a file object, preferring Notion-hosted files."""
    if not obj:
        return None
    return (obj.get("file") or {}).get("url") or (obj.get("external") or {}).get("url")


def extract_property_value(prop: dict) -> Any:
    """Extract a plain value from a page property.

    Args:
        prop: Property object as found in ``page["properties"]``.

    Returns:
        A scalar, list or dict depending on the property type. Unknown
        property types return None.
    """
    prop_type = PropertyType.parse(prop.get("type"))

    if prop_type in (PropertyType.TITLE, PropertyType.RICH_TEXT):
        return extract_rich_text(prop.get(prop_type.value))

    if prop_type in (PropertyType.SELECT, PropertyType.STATUS):
        option = prop.get(prop_type.value)
        return option.get("name") if option else None

    if prop_type == PropertyType.MULTI_SELECT:
        return [option.get("name") for option in prop.get("multi_select") or []]

    if prop_type == PropertyType.FILES:
        return [_file_url(f) for f in prop.get("files") or []]

    if prop_type == PropertyType.RELATION:
        return [ref.get("id") for ref in prop.get("relation") or []]

    # Formula and rollup results hold their value under their own type key
    if prop_type in (PropertyType.FORMULA, PropertyType.ROLLUP):
        result = prop.get(prop_type.value) or {}
        return result.get(result.get("type"))

    if prop_type is not None:
        # number, date, checkbox, url, email, phone_number, timestamps, users
        return prop.get(prop_type.value)

    logger.debug(f"Unknown property type for extraction: {prop.get('type')}")
    return None


def extract_properties(page: dict) -> dict[str, Any]:
    """Extract every property of a page into a name -> value mapping."""
    return {
        name: extract_property_value(prop)
        for name, prop in (page.get("properties") or {}).items()
    }


def extract_title(page: dict) -> str:
    """Extract plain text title from a Notion page object.

    The title property is found by type, so it may be named anything
    ("Name", "Title", ...).

    Returns:
        Plain text title, or an empty string if the page has no title property.
    """
    for prop in (page.get("properties") or {}).values():
        if prop.get("type") == "title" and prop.get("title"):
            return extract_rich_text(prop["title"])
    return ""


def slugify(text: str) -> str:
    """Lowercase ``text`` and collapse non-alphanumeric runs to single hyphens.

    Example:
        >>> slugify("Hello, World!  Foo")
        'hello-world-foo'
    """
    return _NON_ALNUM.sub("-", text.lower()).strip("-")


def extract_slug(page: dict) -> str:
    """Return the page's explicit Slug property, or a slug derived from its title."""
    slug_prop = (page.get("properties") or {}).get(SLUG_PROPERTY) or {}
    if slug_prop.get("rich_text"):
        return extract_rich_text(slug_prop["rich_text"])
    return slugify(extract_title(page))


def extract_block_content(block: dict) -> str:
    """Flatten the rich text of a block's type payload."""
    block_data = block.get(block.get("type", "")) or {}
    return extract_rich_text(block_data.get("rich_text") or block_data.get("text") or [])


def extract_block_metadata(block: dict) -> dict[str, Any]:
    """Collect the auxiliary fields renderers need from a block payload.

    Each field is only present when the payload provides it:
    - language: code blocks
    - checked: to_do blocks
    - icon: callout emoji, or icon image URL
    - url: media, embed and bookmark targets
    - caption: flattened media caption
    - cells: table_row cell texts

    Args:
        block: Raw block dict from the Notion API.

    Returns:
        Metadata dict (possibly empty).
    """
    data = block.get(block.get("type", "")) or {}
    metadata: dict[str, Any] = {}

    if data.get("language"):
        metadata["language"] = data["language"]

    if "checked" in data:
        metadata["checked"] = bool(data["checked"])

    icon = data.get("icon")
    if icon:
        metadata["icon"] = icon.get("emoji") or _file_url(icon) or ""

    url = data.get("url") or _file_url(data)
    if url:
        metadata["url"] = url

    caption = extract_rich_text(data.get("caption"))
    if caption:
        metadata["caption"] = caption

    if "cells" in data:
        metadata["cells"] = [extract_rich_text(cell) for cell in data["cells"] or []]

    return metadata
