"""
Error taxonomy for feed percolator.

Every error is fatal to the run: nothing retries or recovers locally.
"""

from typing import Any, Optional


class PercolatorError(Exception):
    """Base class for all pipeline errors."""


class SourceFetchError(PercolatorError):
    """Raised when a source cannot be fetched or parsed."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch feed: {url} ({reason})")


class FilterExecutionError(PercolatorError):
    """Raised when a filter fails while deciding on an item."""

    def __init__(self, filter_name: str, item_id: Optional[str], reason: str) -> None:
        self.filter_name = filter_name
        self.item_id = item_id
        self.reason = reason
        super().__init__(f"Filter {filter_name!r} failed on item {item_id!r}: {reason}")


class IdentityFieldError(PercolatorError):
    """Raised when an item lacks a field used as a dedup key."""

    def __init__(self, field: str, item_id: Optional[str]) -> None:
        self.field = field
        self.item_id = item_id
        super().__init__(f"Item {item_id!r} has no {field} to deduplicate on")


class OutputWriteError(PercolatorError):
    """Raised when the merged feed cannot be serialized or persisted."""

    def __init__(self, target: Any, reason: str) -> None:
        self.target = target
        self.reason = reason
        super().__init__(f"Failed to write feed to {target!r}: {reason}")
