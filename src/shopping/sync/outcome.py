"""Outcome of one remote-backed store operation."""

from dataclasses import dataclass
from enum import Enum


class SyncStatus(Enum):
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    SKIPPED = "Skipped"


@dataclass(frozen=True)
class SyncOutcome:
    """Exactly one of these is produced per operation.

    ``error`` is set for failures; ``reason`` explains skips (no identity,
    nothing to change) and failures alike.
    """

    operation: str
    status: SyncStatus
    reason: str | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.status == SyncStatus.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.status == SyncStatus.FAILED

    @property
    def skipped(self) -> bool:
        return self.status == SyncStatus.SKIPPED

    @classmethod
    def succeeded(cls, operation: str) -> "SyncOutcome":
        return cls(operation=operation, status=SyncStatus.SUCCEEDED)

    @classmethod
    def failure(cls, error) -> "SyncOutcome":
        return cls(operation=error.operation, status=SyncStatus.FAILED, reason=error.reason, error=error)

    @classmethod
    def skip(cls, operation: str, reason: str) -> "SyncOutcome":
        return cls(operation=operation, status=SyncStatus.SKIPPED, reason=reason)

    def raise_for_failure(self) -> None:
        if self.error is not None:
            raise self.error
