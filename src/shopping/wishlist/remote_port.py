"""Remote wishlist store port (abstract interface).

Defines the contract every wishlist persistence adapter implements, so the
store can run against the in-memory fake in development and tests, or a
polling wrapper when the backend has no push feed.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime

from shopping.catalogue.product import Product
from shopping.wishlist.records import WishlistRecord

SnapshotHandler = Callable[[list[WishlistRecord]], None]


class Subscription(ABC):
    """Handle for an active change feed."""

    @abstractmethod
    def unsubscribe(self) -> None: ...


class WishlistRemote(ABC):
    """Abstract remote wishlist store.

    Every coroutine raises RemoteStoreError when the store cannot complete
    the call.
    """

    @abstractmethod
    async def fetch_wishlist(self, user_id: str) -> list[WishlistRecord]:
        """Return all wishlist documents of a user."""
        ...

    @abstractmethod
    async def put_wishlist_item(self, user_id: str, product_id: str, product: Product, added_at: datetime) -> None:
        """Create or overwrite the document for one wishlisted product."""
        ...

    @abstractmethod
    async def delete_wishlist_item(self, user_id: str, product_id: str) -> None:
        """Delete the document for one wishlisted product."""
        ...

    @abstractmethod
    def subscribe_wishlist(self, user_id: str, on_snapshot: SnapshotHandler) -> Subscription:
        """Deliver the full list of a user's documents on every change."""
        ...
