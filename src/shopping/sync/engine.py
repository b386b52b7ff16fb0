"""Optimistic write with rollback, shared by every remote-backed store.

The local change is applied before the first suspension point so the UI sees
it immediately and local changes stay in call order. The remote effect is
then awaited; when it fails the inverse change is applied and the failure is
returned as a SyncOutcome. Results that arrive after the owning session has
ended are not applied to local state.
"""

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from shopping.sync.errors import FetchFailure, RemoteStoreError, SyncFailure
from shopping.sync.outcome import SyncOutcome

logger = structlog.get_logger(__name__)


def _always_current() -> bool:
    return True


class SyncEngine:
    def __init__(self, timeout: float | None = None):
        self.timeout = timeout

    async def _await_remote(self, remote: Callable[[], Awaitable]):
        if self.timeout is None:
            return await remote()
        return await asyncio.wait_for(remote(), timeout=self.timeout)

    @staticmethod
    def _reason(exc: BaseException) -> str:
        if isinstance(exc, asyncio.TimeoutError):
            return "Remote store did not respond in time"
        return str(exc) or exc.__class__.__name__

    async def run(
        self,
        operation: str,
        apply: Callable[[], None],
        rollback: Callable[[], None],
        remote: Callable[[], Awaitable],
        is_current: Callable[[], bool] = _always_current,
    ) -> SyncOutcome:
        apply()

        try:
            await self._await_remote(remote)
        except (RemoteStoreError, asyncio.TimeoutError) as exc:
            failure = SyncFailure(operation, self._reason(exc))
            if is_current():
                rollback()
                logger.warning("Remote write failed, local change rolled back", operation=operation, reason=failure.reason)
            else:
                logger.info("Remote write failed after its session ended", operation=operation, reason=failure.reason)
            return SyncOutcome.failure(failure)
        except BaseException:
            # Cancellation or an adapter bug: never leave the change half-applied
            if is_current():
                rollback()
            raise

        logger.debug("Remote write confirmed", operation=operation)
        return SyncOutcome.succeeded(operation)

    async def fetch(self, remote: Callable[[], Awaitable]):
        """Await a remote read, translating store errors into FetchFailure."""
        try:
            return await self._await_remote(remote)
        except (RemoteStoreError, asyncio.TimeoutError) as exc:
            raise FetchFailure(self._reason(exc)) from exc
