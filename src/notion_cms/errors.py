"""Exception types raised by notion_cms.

Remote-store failures are not wrapped: the SDK's ``APIResponseError`` and
``HTTPResponseError`` propagate to the caller as-is.
"""


class NotionCMSError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(NotionCMSError, ValueError):
    """Raised when a required setting (e.g. a database ID) is missing."""
