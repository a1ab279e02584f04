"""Content facade: fetch, cache and render Notion pages and databases.

Typical use::

    cms = NotionCMS(CMSConfig.from_env())
    page = cms.get_page(page_id)
    print(page.html)
"""

import logging
from typing import Any, Callable

from notion_cms.cache import TTLCache
from notion_cms.client import NotionContentClient, get_notion_client
from notion_cms.config import CMSConfig
from notion_cms.errors import ConfigurationError
from notion_cms.extract import SLUG_PROPERTY, extract_properties, extract_slug, extract_title
from notion_cms.fetch import fetch_block_tree
from notion_cms.models import CMSCollection, CMSPage, DatabaseQueryOptions, PageContent
from notion_cms.render import to_html, to_markdown

logger = logging.getLogger(__name__)


class NotionCMS:
    """Read Notion content as rendered pages and paginated collections.

    Attributes:
        client: Remote store client.
        database_id: Database used when a call gives no explicit ID.
        cache: TTLCache, or None when caching is disabled.
    """

    def __init__(self, config: CMSConfig, client: NotionContentClient | None = None):
        """Initialize the facade.

        Args:
            config: CMS settings.
            client: Optional pre-built client; one is created from
                ``config.auth`` when omitted.
        """
        self.client = client or get_notion_client(config.auth)
        self.database_id = config.database_id
        self.cache: TTLCache | None = TTLCache(config.cache.ttl) if config.cache.enabled else None

    def _resolve_database_id(self, database_id: str | None) -> str:
        db_id = database_id or self.database_id
        if not db_id:
            raise ConfigurationError("Database ID is required")
        return db_id

    def _cached(self, key: str) -> Any:
        if self.cache is None:
            return None
        value = self.cache.get(key)
        logger.debug(f"Cache {'hit' if value is not None else 'miss'}: {key}")
        return value

    def _store(self, key: str, value: Any) -> None:
        if self.cache is not None:
            self.cache.set(key, value)

    def get_page(self, page_id: str) -> PageContent:
        """Fetch a page with its full block tree and both renderings.

        Args:
            page_id: Notion page ID.

        Returns:
            PageContent, served from the cache when a live entry exists.

        Raises:
            APIResponseError: If the page or any of its blocks cannot be fetched.
        """
        cache_key = f"page:{page_id}"
        cached = self._cached(cache_key)
        if cached is not None:
            return cached

        page = self.client.get_page(page_id)
        blocks = fetch_block_tree(self.client, page_id)

        content = PageContent(
            id=page_id,
            title=extract_title(page),
            properties=extract_properties(page),
            content=blocks,
            html=to_html(blocks),
            markdown=to_markdown(blocks),
            last_edited=page.get("last_edited_time"),
            created_time=page.get("created_time"),
        )
        logger.info(f"Built page {page_id} ({content.title!r})")

        self._store(cache_key, content)
        return content

    def get_database(
        self,
        database_id: str | None = None,
        options: DatabaseQueryOptions | None = None,
    ) -> CMSCollection:
        """Query one page of a database.

        Args:
            database_id: Database to query. Defaults to the configured one.
            options: Filter, sorts, page size and cursor.

        Returns:
            CMSCollection of listed pages (properties only, no block trees).

        Raises:
            ConfigurationError: If no database ID is given or configured.
            APIResponseError: If the query fails.
        """
        db_id = self._resolve_database_id(database_id)
        options = options or DatabaseQueryOptions()

        cache_key = f"db:{db_id}:{options.cache_key()}"
        cached = self._cached(cache_key)
        if cached is not None:
            return cached

        response = self.client.query_database(db_id, **options.to_query())

        pages = tuple(
            CMSPage(
                id=page["id"],
                slug=extract_slug(page),
                title=extract_title(page),
                properties=extract_properties(page),
            )
            for page in response.get("results", [])
        )
        collection = CMSCollection(
            pages=pages,
            has_more=bool(response.get("has_more", False)),
            next_cursor=response.get("next_cursor"),
        )
        logger.debug(f"Database {db_id} returned {len(pages)} pages (has_more={collection.has_more})")

        self._store(cache_key, collection)
        return collection

    def get_all_pages(self, database_id: str | None = None) -> list[CMSPage]:
        """List every page of a database, following cursors to the end.

        Not bounded: avoid on very large databases.
        """
        pages: list[CMSPage] = []
        cursor: str | None = None

        while True:
            collection = self.get_database(
                database_id, DatabaseQueryOptions(start_cursor=cursor, page_size=100)
            )
            pages.extend(collection.pages)
            cursor = collection.next_cursor
            if not cursor:
                break

        logger.info(f"Listed {len(pages)} pages")
        return pages

    def get_page_by_slug(self, slug: str, database_id: str | None = None) -> PageContent | None:
        """Find a page by its Slug property and fetch it.

        Returns:
            PageContent of the first match, or None if no page has this slug.

        Raises:
            ConfigurationError: If no database ID is given or configured.
        """
        db_id = self._resolve_database_id(database_id)

        response = self.client.query_database(
            db_id,
            filter={"property": SLUG_PROPERTY, "rich_text": {"equals": slug}},
            page_size=1,
        )
        results = response.get("results", [])
        if not results:
            logger.debug(f"No page with slug {slug!r} in database {db_id}")
            return None

        return self.get_page(results[0]["id"])

    def clear_cache(self) -> None:
        """Drop every cached page and collection."""
        if self.cache is not None:
            self.cache.clear()

    def invalidate_page(self, page_id: str) -> None:
        """Drop the cached PageContent for ``page_id``."""
        if self.cache is not None:
            self.cache.delete(f"page:{page_id}")

    def invalidation_handler(self) -> Callable[[Any], None]:
        """Return a webhook handler that invalidates the page an event refers to.

        Example:
            >>> webhook.on("page.content_updated", cms.invalidation_handler())
        """

        def _invalidate(event: Any) -> None:
            page_id = event.data.get("page_id")
            if page_id:
                logger.info(f"Invalidating cached page {page_id} after {event.type}")
                self.invalidate_page(page_id)

        return _invalidate
