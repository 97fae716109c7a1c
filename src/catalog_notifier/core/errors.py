"""
Error types raised by the notifier.

Every error carries a short title, an explanatory message and an optional
list of remediation suggestions so the CLI can print something actionable.
"""

from typing import List, Optional


class NotifierError(Exception):
    """Base class for all notifier errors."""

    def __init__(
        self,
        title: str,
        message: str = "",
        suggestions: Optional[List[str]] = None,
    ):
        super().__init__(message or title)
        self.title = title
        self.message = message
        self.suggestions = list(suggestions or [])


class ConfigError(NotifierError):
    """Raised when the catalog directory or notifier config is unusable."""
    pass


class GitError(NotifierError):
    """Raised when git cannot answer a query (bad range, not a repository)."""
    pass


class CatalogLookupError(NotifierError):
    """Raised when a catalog resource cannot be resolved."""
    pass


class DeliveryError(NotifierError):
    """Raised when a webhook delivery fails (non-2xx or transport error)."""

    def __init__(self, endpoint: str, message: str, status_code: Optional[int] = None):
        super().__init__(
            "Failed to deliver notification",
            message,
            [
                f"Check that the webhook is reachable: {endpoint}",
                "Verify any credentials configured in the channel headers",
            ],
        )
        self.endpoint = endpoint
        self.status_code = status_code
