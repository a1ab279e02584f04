"""Notion CMS - Render Notion pages to HTML/Markdown and process Notion webhooks.

Module structure:
- cms: Content facade (fetch + cache + render)
- client: Notion API wrapper
- fetch: Paginated, recursive block tree fetching
- extract: Rich text, property and block metadata extraction
- render: HTML and Markdown renderers
- cache: TTL memoization cache
- webhook: Signature verification, event dispatch and WSGI adapters
- models: Content data types
- config: Environment-based configuration
- errors: Exception types
"""

# Facade
from notion_cms.cms import NotionCMS

# Client
from notion_cms.client import get_notion_client, NotionContentClient

# Config
from notion_cms.config import CMSConfig, CacheConfig, WebhookConfig, get_notion_token

# Errors
from notion_cms.errors import NotionCMSError, ConfigurationError

# Cache
from notion_cms.cache import TTLCache

# Fetch operations
from notion_cms.fetch import fetch_all_blocks, build_tree, fetch_block_tree

# Extract operations
from notion_cms.extract import (
    extract_rich_text,
    extract_property_value,
    extract_properties,
    extract_title,
    extract_slug,
    extract_block_metadata,
    slugify,
)

# Rendering
from notion_cms.render import to_html, to_markdown, escape_html

# Models
from notion_cms.models import (
    BlockType,
    PropertyType,
    ContentBlock,
    PageContent,
    CMSPage,
    CMSCollection,
    DatabaseQueryOptions,
)

# Webhooks
from notion_cms.webhook import (
    NotionWebhook,
    WebhookEvent,
    WebhookEventType,
    WebhookResponse,
    WILDCARD,
)

__all__ = [
    # Facade
    "NotionCMS",
    # Client
    "get_notion_client",
    "NotionContentClient",
    # Config
    "CMSConfig",
    "CacheConfig",
    "WebhookConfig",
    "get_notion_token",
    # Errors
    "NotionCMSError",
    "ConfigurationError",
    # Cache
    "TTLCache",
    # Fetch
    "fetch_all_blocks",
    "build_tree",
    "fetch_block_tree",
    # Extract
    "extract_rich_text",
    "extract_property_value",
    "extract_properties",
    "extract_title",
    "extract_slug",
    "extract_block_metadata",
    "slugify",
    # Render
    "to_html",
    "to_markdown",
    "escape_html",
    # Models
    "BlockType",
    "PropertyType",
    "ContentBlock",
    "PageContent",
    "CMSPage",
    "CMSCollection",
    "DatabaseQueryOptions",
    # Webhooks
    "NotionWebhook",
    "WebhookEvent",
    "WebhookEventType",
    "WebhookResponse",
    "WILDCARD",
]
