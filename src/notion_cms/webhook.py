"""Notion webhook verification and event dispatch.

Incoming requests go through :meth:`NotionWebhook.handle_request`, whichever
adapter hosts the endpoint:

- ``handle_request(body, headers)``: raw call returning a WebhookResponse.
- ``wsgi_middleware(app, path)``: wraps an existing WSGI application.
- ``wsgi_app()``: a standalone WSGI application for a single endpoint.

Handlers are callables taking a WebhookEvent; coroutine functions are run
to completion before the next handler starts. They run one after the
other: handlers for the event's type first, then wildcard handlers, each in
registration order. A handler exception is not caught and aborts dispatch.
"""

import asyncio
import hashlib
import hmac
import inspect
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Mapping

from notion_cms.config import WebhookConfig

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-notion-signature"
TIMESTAMP_HEADER = "x-notion-timestamp"
SIGNATURE_VERSION = "v0"

WILDCARD = "*"


class WebhookEventType(str, Enum):
    """Event types delivered by Notion webhooks."""

    PAGE_CREATED = "page.created"
    PAGE_CONTENT_UPDATED = "page.content_updated"
    PAGE_PROPERTIES_UPDATED = "page.properties_updated"
    PAGE_DELETED = "page.deleted"
    PAGE_RESTORED = "page.restored"
    PAGE_MOVED = "page.moved"
    PAGE_LOCKED = "page.locked"
    PAGE_UNLOCKED = "page.unlocked"
    DATABASE_CREATED = "database.created"
    DATABASE_CONTENT_UPDATED = "database.content_updated"
    DATABASE_PROPERTIES_UPDATED = "database.properties_updated"
    DATABASE_DELETED = "database.deleted"
    DATABASE_RESTORED = "database.restored"
    DATABASE_MOVED = "database.moved"


@dataclass(frozen=True)
class WebhookEvent:
    """A change notification for a page or database."""

    type: str
    timestamp: str = ""
    workspace_id: str = ""
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "WebhookEvent":
        return cls(
            type=payload.get("type", ""),
            timestamp=payload.get("timestamp", ""),
            workspace_id=payload.get("workspace_id", ""),
            data=dict(payload.get("data") or {}),
        )

    @property
    def kind(self) -> WebhookEventType | None:
        """The event type as an enum member, None if Notion sent an unlisted type."""
        try:
            return WebhookEventType(self.type)
        except ValueError:
            return None

    @property
    def page_id(self) -> str | None:
        return self.data.get("page_id")

    @property
    def database_id(self) -> str | None:
        return self.data.get("database_id")


@dataclass(frozen=True)
class WebhookResponse:
    """HTTP status and JSON body to send back to Notion."""

    status: int
    body: dict[str, Any]


WebhookHandler = Callable[[WebhookEvent], Any]


def _normalize_event_type(event_type: "WebhookEventType | str") -> str:
    if event_type == WILDCARD:
        return WILDCARD
    try:
        return WebhookEventType(event_type).value
    except ValueError:
        raise ValueError(f"Unknown webhook event type: {event_type!r}") from None


class NotionWebhook:
    """Verifies Notion webhook requests and dispatches events to handlers."""

    def __init__(
        self,
        secret: str,
        on_page_update: WebhookHandler | None = None,
        on_page_create: WebhookHandler | None = None,
        on_page_delete: WebhookHandler | None = None,
        on_database_update: WebhookHandler | None = None,
        on_any_event: WebhookHandler | None = None,
    ):
        """Initialize the processor.

        Args:
            secret: Shared secret used to sign requests.
            on_page_update: Registered for page content and property updates.
            on_page_create: Registered for page.created.
            on_page_delete: Registered for page.deleted.
            on_database_update: Registered for database content and property updates.
            on_any_event: Registered for every event type.
        """
        self._secret = secret.encode("utf-8")
        self._handlers: dict[str, list[WebhookHandler]] = {}

        if on_page_update:
            self.on(WebhookEventType.PAGE_CONTENT_UPDATED, on_page_update)
            self.on(WebhookEventType.PAGE_PROPERTIES_UPDATED, on_page_update)
        if on_page_create:
            self.on(WebhookEventType.PAGE_CREATED, on_page_create)
        if on_page_delete:
            self.on(WebhookEventType.PAGE_DELETED, on_page_delete)
        if on_database_update:
            self.on(WebhookEventType.DATABASE_CONTENT_UPDATED, on_database_update)
            self.on(WebhookEventType.DATABASE_PROPERTIES_UPDATED, on_database_update)
        if on_any_event:
            self.on(WILDCARD, on_any_event)

    @classmethod
    def from_config(cls, config: WebhookConfig, **handlers: WebhookHandler) -> "NotionWebhook":
        return cls(config.secret, **handlers)

    # =========================================================================
    # HANDLER REGISTRY
    # =========================================================================

    def on(self, event_type: WebhookEventType | str, handler: WebhookHandler) -> None:
        """Register ``handler`` for an event type, or ``"*"`` for all events.

        Raises:
            ValueError: If ``event_type`` is neither a known type nor ``"*"``.
        """
        self._handlers.setdefault(_normalize_event_type(event_type), []).append(handler)

    def off(self, event_type: WebhookEventType | str, handler: WebhookHandler) -> None:
        """Unregister the first registration of this exact handler object."""
        handlers = self._handlers.get(_normalize_event_type(event_type), [])
        for i, registered in enumerate(handlers):
            if registered is handler:
                del handlers[i]
                return

    def handlers_for(self, event_type: WebhookEventType | str) -> list[WebhookHandler]:
        """Return a copy of the handlers registered for ``event_type``."""
        return list(self._handlers.get(_normalize_event_type(event_type), []))

    # =========================================================================
    # VERIFICATION AND DISPATCH
    # =========================================================================

    def sign(self, payload: str, timestamp: str) -> str:
        """Compute the ``v0=<hex>`` signature Notion sends for ``payload``."""
        message = f"{SIGNATURE_VERSION}:{timestamp}:{payload}".encode("utf-8")
        digest = hmac.new(self._secret, message, hashlib.sha256).hexdigest()
        return f"{SIGNATURE_VERSION}={digest}"

    def verify_signature(self, payload: str, signature: str, timestamp: str) -> bool:
        """Check ``signature`` against the payload, in constant time."""
        return hmac.compare_digest(
            self.sign(payload, timestamp).encode("utf-8"),
            signature.encode("utf-8"),
        )

    def handle_request(
        self,
        body: str | bytes | Mapping[str, Any],
        headers: Mapping[str, str | None],
    ) -> WebhookResponse:
        """Process one webhook delivery.

        Args:
            body: Raw request body, or an already parsed JSON object.
            headers: Request headers. Names are matched case-insensitively.

        Returns:
            200 with the challenge for url_verification, 401 on a bad
            signature, 200 ``{"ok": true}`` otherwise.

        Raises:
            json.JSONDecodeError: If ``body`` is not valid JSON.
            UnicodeDecodeError: If a bytes ``body`` is not valid UTF-8.
            Exception: Whatever a handler raises.
        """
        lowered = {name.lower(): value for name, value in headers.items()}
        signature = lowered.get(SIGNATURE_HEADER)
        timestamp = lowered.get(TIMESTAMP_HEADER)

        if isinstance(body, bytes):
            body = body.decode("utf-8")
        if isinstance(body, str):
            body_string = body
            payload = json.loads(body)
        else:
            payload = dict(body)
            body_string = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)

        # Valid JSON that is not an object carries no type to act on
        if not isinstance(payload, dict):
            payload = {}

        # Handshake: Notion confirms the endpoint before signing anything
        if payload.get("type") == "url_verification":
            logger.info("Answering webhook url_verification challenge")
            return WebhookResponse(200, {"challenge": payload.get("verification_token")})

        # Unsigned requests are accepted as-is
        if signature and timestamp:
            if not self.verify_signature(body_string, signature, timestamp):
                logger.warning("Rejected webhook request with invalid signature")
                return WebhookResponse(401, {"error": "Invalid signature"})

        if payload.get("type") == "event" and payload.get("event"):
            self.process_event(WebhookEvent.from_dict(payload["event"]))

        return WebhookResponse(200, {"ok": True})

    def process_event(self, event: WebhookEvent) -> None:
        """Run specific handlers, then wildcard handlers, for ``event``.

        A handler returning an awaitable is driven to completion on a fresh
        event loop before the next handler runs, so this must not be called
        from inside a running loop.
        """
        handlers = list(self._handlers.get(event.type, []))
        wildcard_handlers = list(self._handlers.get(WILDCARD, []))
        logger.debug(
            f"Dispatching {event.type} to {len(handlers)} handlers "
            f"and {len(wildcard_handlers)} wildcard handlers"
        )

        for handler in handlers + wildcard_handlers:
            result = handler(event)
            if inspect.isawaitable(result):
                asyncio.run(_await(result))

    # =========================================================================
    # WSGI ADAPTERS
    # =========================================================================

    def _handle_environ(self, environ: dict) -> WebhookResponse:
        length = int(environ.get("CONTENT_LENGTH") or 0)
        body = environ["wsgi.input"].read(length) if length else b""
        return self.handle_request(body, _headers_from_environ(environ))

    def wsgi_app(self) -> Callable[[dict, Callable], Iterable[bytes]]:
        """Return a WSGI application serving the webhook endpoint.

        Anything but POST gets a 405.
        """

        def app(environ: dict, start_response: Callable) -> Iterable[bytes]:
            if environ.get("REQUEST_METHOD", "GET").upper() != "POST":
                return _respond(start_response, WebhookResponse(405, {"error": "Method not allowed"}))
            return _respond(start_response, self._handle_environ(environ))

        return app

    def wsgi_middleware(
        self, wrapped: Callable[[dict, Callable], Iterable[bytes]], path: str = "/"
    ) -> Callable[[dict, Callable], Iterable[bytes]]:
        """Wrap a WSGI app so POSTs to ``path`` are handled as webhooks.

        Other requests go to ``wrapped``. A body that cannot be decoded or
        parsed is logged and handed to ``wrapped`` too; by then
        ``wsgi.input`` has been consumed. Handler exceptions propagate.
        """

        def middleware(environ: dict, start_response: Callable) -> Iterable[bytes]:
            if environ.get("PATH_INFO", "/") != path or environ.get("REQUEST_METHOD", "GET").upper() != "POST":
                return wrapped(environ, start_response)
            try:
                response = self._handle_environ(environ)
            except ValueError:
                logger.exception("Unreadable webhook body, passing request on")
                return wrapped(environ, start_response)
            return _respond(start_response, response)

        return middleware


async def _await(awaitable: Any) -> Any:
    return await awaitable


_STATUS_TEXT = {200: "OK", 401: "Unauthorized", 405: "Method Not Allowed"}


def _headers_from_environ(environ: dict) -> dict[str, str]:
    """Rebuild HTTP header names (lowercase, dashed) from a WSGI environ."""
    headers = {}
    for key, value in environ.items():
        if key.startswith("HTTP_"):
            headers[key[5:].replace("_", "-").lower()] = value
    return headers


def _respond(start_response: Callable, response: WebhookResponse) -> list[bytes]:
    payload = json.dumps(response.body).encode("utf-8")
    status = f"{response.status} {_STATUS_TEXT.get(response.status, '')}".rstrip()
    start_response(
        status,
        [("Content-Type", "application/json"), ("Content-Length", str(len(payload)))],
    )
    return [payload]
