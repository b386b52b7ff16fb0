"""Errors raised at the boundary between local state and the remote store."""


class RemoteStoreError(Exception):
    """A call to the remote document store failed."""


class SyncFailure(Exception):
    """An optimistic remote write failed and its local change was rolled back."""

    def __init__(self, operation: str, reason: str):
        super().__init__(f"{operation} failed: {reason}")
        self.operation = operation
        self.reason = reason


class FetchFailure(Exception):
    """Loading remote state failed; local state was left empty."""

    def __init__(self, reason: str):
        super().__init__(f"fetch failed: {reason}")
        self.operation = "fetch_wishlist"
        self.reason = reason
