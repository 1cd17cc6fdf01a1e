"""Error taxonomy for time-series store access."""

from __future__ import annotations


class StoreError(RuntimeError):
    """Base class for failures talking to a time-series store."""

    def __init__(self, message: str, store: str | None = None) -> None:
        super().__init__(message)
        self.store = store


class StoreUnavailable(StoreError):
    """The store connection could not be established or released."""


class StoreQueryFailed(StoreError):
    """A query ran but failed, or returned rows that could not be parsed."""


class StoreWriteFailed(StoreError):
    """A batched write to the store was rejected or failed in transit."""
