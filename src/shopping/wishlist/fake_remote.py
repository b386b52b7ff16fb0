"""Configurable in-memory wishlist store for development and testing.

Simulates a document store with a push feed: documents live in a dict keyed
``{user_id}_{product_id}`` and every successful write pushes the user's full
document list to subscribers, the way a real change feed would. It can be
configured to fail all or selected operations, to add latency, or to hold
calls until released, which makes in-flight optimistic states observable.
"""

import asyncio
from datetime import datetime

from shopping.catalogue.product import Product
from shopping.sync.errors import RemoteStoreError
from shopping.wishlist.records import WishlistRecord, document_id
from shopping.wishlist.remote_port import SnapshotHandler, Subscription, WishlistRemote


class FakeSubscription(Subscription):
    def __init__(self, remote: "FakeWishlistRemote", user_id: str, handler: SnapshotHandler):
        self._remote = remote
        self.user_id = user_id
        self.handler = handler
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._remote._subscriptions.remove(self)


class FakeWishlistRemote(WishlistRemote):
    """In-memory wishlist store with failure injection."""

    def __init__(self) -> None:
        self.documents: dict[str, WishlistRecord] = {}
        self.calls: list[dict] = []
        self.should_succeed: bool = True
        self.failure_reason: str = "Remote store unavailable"
        self.failing_operations: set[str] | None = None
        self.latency: float = 0.0
        self.auto_push: bool = True
        self._subscriptions: list[FakeSubscription] = []
        self._gate: asyncio.Event | None = None

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Remote store unavailable",
        operations: set[str] | None = None,
        latency: float | None = None,
    ) -> None:
        """Configure store behavior; ``operations`` limits failures to those calls."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.failing_operations = set(operations) if operations else None
        if latency is not None:
            self.latency = latency

    def pause(self) -> None:
        """Hold every subsequent call until resume() is called."""
        self._gate = asyncio.Event()

    def resume(self) -> None:
        if self._gate is not None:
            self._gate.set()
            self._gate = None

    def seed(self, user_id: str, product: Product, added_at: datetime) -> WishlistRecord:
        """Store a document directly, without recording a call or pushing."""
        record = WishlistRecord.build(user_id, product, added_at)
        self.documents[record.document_id] = record
        return record

    def records_for(self, user_id: str) -> list[WishlistRecord]:
        return [record for record in self.documents.values() if record.user_id == str(user_id)]

    @property
    def subscriptions(self) -> list[FakeSubscription]:
        return list(self._subscriptions)

    def emit_snapshot(self, user_id: str, records: list[WishlistRecord] | None = None) -> None:
        """Push a snapshot to the user's subscribers (stored documents by default)."""
        snapshot = self.records_for(user_id) if records is None else list(records)
        for subscription in list(self._subscriptions):
            if subscription.active and subscription.user_id == str(user_id):
                subscription.handler(list(snapshot))

    async def _call(self, method: str, **kwargs) -> None:
        self.calls.append({"method": method, **kwargs})

        gate = self._gate
        if gate is not None:
            await gate.wait()
        await asyncio.sleep(self.latency)

        failing = self.failing_operations is None or method in self.failing_operations
        if not self.should_succeed and failing:
            raise RemoteStoreError(self.failure_reason)

    # -------------------------------------------------------------------
    # WishlistRemote
    # -------------------------------------------------------------------
    async def fetch_wishlist(self, user_id: str) -> list[WishlistRecord]:
        await self._call("fetch_wishlist", user_id=str(user_id))
        return self.records_for(user_id)

    async def put_wishlist_item(self, user_id: str, product_id: str, product: Product, added_at: datetime) -> None:
        await self._call("put_wishlist_item", user_id=str(user_id), product_id=str(product_id))
        record = WishlistRecord.build(user_id, product, added_at)
        self.documents[document_id(user_id, product_id)] = record
        if self.auto_push:
            self.emit_snapshot(user_id)

    async def delete_wishlist_item(self, user_id: str, product_id: str) -> None:
        await self._call("delete_wishlist_item", user_id=str(user_id), product_id=str(product_id))
        self.documents.pop(document_id(user_id, product_id), None)
        if self.auto_push:
            self.emit_snapshot(user_id)

    def subscribe_wishlist(self, user_id: str, on_snapshot: SnapshotHandler) -> Subscription:
        subscription = FakeSubscription(self, str(user_id), on_snapshot)
        self._subscriptions.append(subscription)
        return subscription

    def reset(self) -> None:
        """Clear documents, calls and failure configuration (useful between tests)."""
        self.documents.clear()
        self.calls.clear()
        self.should_succeed = True
        self.failure_reason = "Remote store unavailable"
        self.failing_operations = None
        self.latency = 0.0
        self.auto_push = True
        self._subscriptions.clear()
        self._gate = None
