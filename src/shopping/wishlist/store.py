"""WishlistStore — optimistic, identity-bound mirror of the remote wishlist.

Each identity session gets a session token. Remote results (fetches,
snapshots, failed writes) are only applied while their token is still the
current one, so nothing from a previous user or a closed store can touch
local state. The remote change feed is authoritative: every snapshot
replaces local items wholesale, including optimistic ones.
"""

from collections.abc import Callable
from datetime import UTC, datetime

import structlog

from shopping.sync.engine import SyncEngine
from shopping.sync.errors import FetchFailure
from shopping.sync.outcome import SyncOutcome
from shopping.wishlist.records import WishlistRecord
from shopping.wishlist.remote_port import Subscription, WishlistRemote
from shopping.wishlist.state import WishlistState
from shopping.wishlist.wishlist import Wishlist, WishlistStatus

logger = structlog.get_logger(__name__)

WishlistListener = Callable[[WishlistState, list], None]


class WishlistStore:
    def __init__(
        self,
        remote: WishlistRemote,
        engine: SyncEngine | None = None,
        identity_source=None,
        wishlist: Wishlist | None = None,
    ):
        self._remote = remote
        self._engine = engine or SyncEngine()
        self._wishlist = wishlist if wishlist is not None else Wishlist.create()
        self._listeners: list[WishlistListener] = []
        self._subscription: Subscription | None = None
        self._session = 0
        self._closed = False
        self._state = WishlistState.from_wishlist(self._wishlist)
        self._unsubscribe_identity = None

        if identity_source is not None:
            self._unsubscribe_identity = identity_source.subscribe(self.on_identity_changed)

    @property
    def state(self) -> WishlistState:
        return self._state

    @property
    def user_id(self) -> str | None:
        return str(self._wishlist.user_id) if self._wishlist.user_id else None

    def is_in_wishlist(self, product_id) -> bool:
        return self._wishlist.contains(product_id)

    def _is_current(self, session: int) -> bool:
        return not self._closed and session == self._session

    # -------------------------------------------------------------------
    # Identity lifecycle
    # -------------------------------------------------------------------
    async def on_identity_changed(self, identity) -> SyncOutcome | None:
        """Clear on sign-out; start a new session and load on sign-in."""
        if self._closed:
            return None

        if identity is None:
            if self._wishlist.user_id is None and self._wishlist.status == WishlistStatus.UNAUTHENTICATED.value:
                return None
            self._end_session()
            return None

        user_id = str(identity.user_id)
        if self.user_id == user_id and self._wishlist.status != WishlistStatus.ERROR.value:
            return None

        self._drop_subscription()
        self._session += 1
        session = self._session

        self._wishlist.start_session(user_id)
        self._publish()

        self._subscription = self._remote.subscribe_wishlist(
            user_id, lambda records: self._on_snapshot(session, records)
        )
        return await self._load(session, user_id)

    def _end_session(self) -> None:
        self._drop_subscription()
        self._session += 1
        self._wishlist.end_session()
        self._publish()

    def _drop_subscription(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def retry(self) -> SyncOutcome:
        """Reload the wishlist of the current identity."""
        user_id = self.user_id
        if self._closed or user_id is None:
            logger.warning("Wishlist retry ignored without a signed-in identity")
            return SyncOutcome.skip("fetch_wishlist", "No signed-in identity")

        self._wishlist.begin_loading()
        self._publish()
        return await self._load(self._session, user_id)

    async def _load(self, session: int, user_id: str) -> SyncOutcome:
        try:
            records = await self._engine.fetch(lambda: self._remote.fetch_wishlist(user_id))
        except FetchFailure as failure:
            if self._is_current(session):
                if self._wishlist.is_loading:
                    logger.error("Wishlist load failed", user_id=user_id, reason=failure.reason)
                    self._wishlist.load_failed(failure.reason)
                else:
                    logger.warning(
                        "Wishlist load failed after the change feed synced", user_id=user_id, reason=failure.reason
                    )
                    self._wishlist.load_superseded(failure.reason)
                self._publish()
            return SyncOutcome.failure(failure)

        if not self._is_current(session):
            logger.info("Discarding wishlist load for an ended session", user_id=user_id)
            return SyncOutcome.skip("fetch_wishlist", "Session ended before the load completed")

        if self._wishlist.status == WishlistStatus.LOADING.value:
            self._apply_records(records)
        else:
            # The change feed delivered a newer snapshot while the fetch was in flight
            logger.debug("Wishlist already synced by the change feed", user_id=user_id)

        logger.info("Wishlist loaded", user_id=user_id, item_count=len(self._wishlist.items))
        return SyncOutcome.succeeded("fetch_wishlist")

    def _on_snapshot(self, session: int, records: list[WishlistRecord]) -> None:
        if not self._is_current(session):
            return
        self._apply_records(records)

    def _apply_records(self, records: list[WishlistRecord]) -> None:
        self._wishlist.replace_items(
            [WishlistRecord.model_validate(record).to_entry() for record in records]
        )
        self._publish()

    # -------------------------------------------------------------------
    # Optimistic writes
    # -------------------------------------------------------------------
    async def add_to_wishlist(self, product) -> SyncOutcome:
        operation = "add_to_wishlist"
        user_id = self.user_id
        if self._closed or user_id is None:
            logger.warning("Wishlist add ignored without a signed-in identity", product_id=str(product.product_id))
            return SyncOutcome.skip(operation, "No signed-in identity")

        if self._wishlist.contains(product.product_id):
            return SyncOutcome.skip(operation, "Product is already in the wishlist")

        session = self._session
        product_id = str(product.product_id)
        added_at = datetime.now(UTC)

        def apply():
            self._wishlist.add_product(product, added_at)
            self._publish()

        def rollback():
            if self._wishlist.revert_add(product_id, added_at):
                self._publish()

        outcome = await self._engine.run(
            operation,
            apply=apply,
            rollback=rollback,
            remote=lambda: self._remote.put_wishlist_item(user_id, product_id, product, added_at),
            is_current=lambda: self._is_current(session),
        )
        self._record_failure(outcome, session)
        return outcome

    async def remove_from_wishlist(self, product_id) -> SyncOutcome:
        operation = "remove_from_wishlist"
        user_id = self.user_id
        if self._closed or user_id is None:
            logger.warning("Wishlist remove ignored without a signed-in identity", product_id=str(product_id))
            return SyncOutcome.skip(operation, "No signed-in identity")

        if not self._wishlist.contains(product_id):
            return SyncOutcome.skip(operation, "Product is not in the wishlist")

        session = self._session
        product_id = str(product_id)
        removed = []

        def apply():
            removed.append(self._wishlist.remove_product(product_id))
            self._publish()

        def rollback():
            position, product, added_at = removed[0]
            if self._wishlist.revert_remove(position, product, added_at):
                self._publish()

        outcome = await self._engine.run(
            operation,
            apply=apply,
            rollback=rollback,
            remote=lambda: self._remote.delete_wishlist_item(user_id, product_id),
            is_current=lambda: self._is_current(session),
        )
        self._record_failure(outcome, session)
        return outcome

    def _record_failure(self, outcome: SyncOutcome, session: int) -> None:
        if outcome.failed and self._is_current(session):
            self._wishlist.write_failed(outcome.operation, outcome.reason)
            self._publish()

    # -------------------------------------------------------------------
    # Observation
    # -------------------------------------------------------------------
    def subscribe(self, listener: WishlistListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Stop reacting to remote results and drop all listeners."""
        self._closed = True
        self._drop_subscription()
        if self._unsubscribe_identity is not None:
            self._unsubscribe_identity()
            self._unsubscribe_identity = None
        self._listeners.clear()

    def _publish(self) -> None:
        events = list(self._wishlist._events)
        self._wishlist._events.clear()
        self._state = WishlistState.from_wishlist(self._wishlist)

        for listener in list(self._listeners):
            listener(self._state, events)
