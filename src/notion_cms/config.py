"""Configuration for the content facade and the webhook processor.

Values are read from the environment. A ``.env`` file found in the working
directory or next to the package is loaded first.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 300

_TRUTHY = {"1", "true", "yes", "on"}

# Auto-load .env once per process
_env_loaded = False


def _ensure_env_loaded() -> None:
    """Load .env file if not already loaded."""
    global _env_loaded
    if _env_loaded:
        return

    # Working directory first, then walk up from this file
    candidates = [Path.cwd() / ".env"]
    current = Path(__file__).resolve()
    candidates += [parent / ".env" for parent in current.parents]
    for env_file in candidates:
        if env_file.exists():
            load_dotenv(env_file)
            logger.debug(f"Loaded environment from {env_file}")
            break

    _env_loaded = True


def get_notion_token() -> str:
    """Get Notion API token from environment.

    Returns:
        The NOTION_API_TOKEN environment variable value.

    Raises:
        ValueError: If NOTION_API_TOKEN is not set.
    """
    _ensure_env_loaded()

    token = os.environ.get("NOTION_API_TOKEN")
    if not token:
        raise ValueError(
            "NOTION_API_TOKEN environment variable not set.\n"
            "Get your token at: https://www.notion.so/my-integrations"
        )
    return token


@dataclass
class CacheConfig:
    """Memoization settings. The cache is off unless enabled explicitly."""

    enabled: bool = False
    ttl: int = DEFAULT_CACHE_TTL


@dataclass
class CMSConfig:
    """Settings for :class:`notion_cms.cms.NotionCMS`.

    Attributes:
        auth: Notion integration token.
        database_id: Collection queried when no ID is passed explicitly.
        cache: Memoization settings.
    """

    auth: str
    database_id: str | None = None
    cache: CacheConfig = field(default_factory=CacheConfig)

    @classmethod
    def from_env(cls) -> "CMSConfig":
        """Build a config from NOTION_API_TOKEN, NOTION_DATABASE_ID,
        NOTION_CMS_CACHE and NOTION_CMS_CACHE_TTL.

        Raises:
            ValueError: If NOTION_API_TOKEN is not set.
        """
        token = get_notion_token()
        enabled = os.environ.get("NOTION_CMS_CACHE", "").strip().lower() in _TRUTHY
        ttl = int(os.environ.get("NOTION_CMS_CACHE_TTL", DEFAULT_CACHE_TTL))
        return cls(
            auth=token,
            database_id=os.environ.get("NOTION_DATABASE_ID") or None,
            cache=CacheConfig(enabled=enabled, ttl=ttl),
        )


@dataclass
class WebhookConfig:
    """Settings for :class:`notion_cms.webhook.NotionWebhook`."""

    secret: str

    @classmethod
    def from_env(cls) -> "WebhookConfig":
        """Build a config from NOTION_WEBHOOK_SECRET.

        Raises:
            ValueError: If NOTION_WEBHOOK_SECRET is not set.
        """
        _ensure_env_loaded()

        secret = os.environ.get("NOTION_WEBHOOK_SECRET")
        if not secret:
            raise ValueError("NOTION_WEBHOOK_SECRET environment variable not set.")
        return cls(secret=secret)
