"""Polling change feed for wishlist stores without push notifications.

Wraps another remote and turns ``subscribe_wishlist`` into a background task
that fetches the user's documents every ``interval`` seconds and delivers
each result as a snapshot. Snapshots replace local state wholesale exactly
like pushed ones, so the store does not know which transport it runs on.
Each fetch is bounded by ``timeout``; failed polls and snapshots that cannot
be applied are logged and the feed keeps running.
"""

import asyncio
from datetime import datetime

import structlog

from shopping.catalogue.product import Product
from shopping.sync.errors import RemoteStoreError
from shopping.wishlist.records import WishlistRecord
from shopping.wishlist.remote_port import SnapshotHandler, Subscription, WishlistRemote

logger = structlog.get_logger(__name__)


class PollingSubscription(Subscription):
    def __init__(self, task: asyncio.Task):
        self._task = task

    @property
    def active(self) -> bool:
        return not self._task.done()

    def unsubscribe(self) -> None:
        self._task.cancel()


class PollingWishlistRemote(WishlistRemote):
    def __init__(self, remote: WishlistRemote, interval: float = 30.0, timeout: float | None = None):
        self._remote = remote
        self.interval = interval
        self.timeout = timeout

    async def fetch_wishlist(self, user_id: str) -> list[WishlistRecord]:
        return await self._remote.fetch_wishlist(user_id)

    async def put_wishlist_item(self, user_id: str, product_id: str, product: Product, added_at: datetime) -> None:
        await self._remote.put_wishlist_item(user_id, product_id, product, added_at)

    async def delete_wishlist_item(self, user_id: str, product_id: str) -> None:
        await self._remote.delete_wishlist_item(user_id, product_id)

    def subscribe_wishlist(self, user_id: str, on_snapshot: SnapshotHandler) -> Subscription:
        """Start polling; must be called from a running event loop."""
        task = asyncio.get_running_loop().create_task(self._poll(user_id, on_snapshot))
        return PollingSubscription(task)

    async def _fetch(self, user_id: str) -> list[WishlistRecord]:
        if self.timeout is None:
            return await self._remote.fetch_wishlist(user_id)
        return await asyncio.wait_for(self._remote.fetch_wishlist(user_id), timeout=self.timeout)

    async def _poll(self, user_id: str, on_snapshot: SnapshotHandler) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                records = await self._fetch(user_id)
            except (RemoteStoreError, asyncio.TimeoutError) as exc:
                logger.warning("Wishlist poll failed", user_id=user_id, error=str(exc) or exc.__class__.__name__)
                continue

            try:
                on_snapshot(records)
            except Exception as exc:
                logger.error("Wishlist snapshot could not be applied", user_id=user_id, error=str(exc))
