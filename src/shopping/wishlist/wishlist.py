"""Wishlist aggregate — local mirror of the signed-in user's remote wishlist.

State Machine:
    UNAUTHENTICATED → (identity appears) → LOADING → SYNCED
    SYNCED → (identity disappears) → UNAUTHENTICATED (empty)
    LOADING / SYNCED → ERROR (remote failure)
    ERROR → LOADING (retry)

Only start_session() leaves UNAUTHENTICATED; begin_loading() needs a session.

Items are unique by product id. Optimistic changes are applied here first
and reverted with the matching revert method when the remote write fails.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, String, ValueObject

from shopping.catalogue.product import Product
from shopping.domain import shopping
from shopping.wishlist.events import (
    WishlistChangeReverted,
    WishlistCleared,
    WishlistItemAdded,
    WishlistItemRemoved,
    WishlistReplaced,
    WishlistSessionStarted,
    WishlistSyncFailed,
)


class WishlistStatus(Enum):
    UNAUTHENTICATED = "Unauthenticated"
    LOADING = "Loading"
    SYNCED = "Synced"
    ERROR = "Error"


_VALID_TRANSITIONS = {
    WishlistStatus.UNAUTHENTICATED: set(),
    WishlistStatus.LOADING: {WishlistStatus.SYNCED, WishlistStatus.ERROR, WishlistStatus.LOADING},
    WishlistStatus.SYNCED: {WishlistStatus.SYNCED, WishlistStatus.ERROR, WishlistStatus.LOADING},
    WishlistStatus.ERROR: {WishlistStatus.LOADING, WishlistStatus.SYNCED, WishlistStatus.ERROR},
}


@shopping.entity(part_of="Wishlist")
class WishlistItem:
    product = ValueObject(Product, required=True)
    added_at = DateTime(required=True)


@shopping.aggregate
class Wishlist:
    user_id = Identifier()
    status = String(choices=WishlistStatus, default=WishlistStatus.UNAUTHENTICATED.value)
    items = HasMany(WishlistItem)
    last_error = String(max_length=500)
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls):
        return cls(
            status=WishlistStatus.UNAUTHENTICATED.value,
            updated_at=datetime.now(UTC),
        )

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_loading(self) -> bool:
        return self.status == WishlistStatus.LOADING.value

    def find_item(self, product_id):
        return next((i for i in self.items if str(i.product.product_id) == str(product_id)), None)

    def contains(self, product_id) -> bool:
        return self.find_item(product_id) is not None

    def entries(self) -> list[tuple[Product, datetime]]:
        return [(item.product, item.added_at) for item in self.items]

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def _transition(self, target_status):
        current = WishlistStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})
        self.status = target_status.value
        self.updated_at = datetime.now(UTC)

    def _rebuild(self, entries):
        for item in list(self.items):
            self.remove_items(item)
        for product, added_at in entries:
            self.add_items(WishlistItem(product=product, added_at=added_at))

    def start_session(self, user_id):
        """Bind a signed-in identity: drop any previous items and start loading."""
        self._rebuild([])
        self.user_id = user_id
        self.last_error = None
        self.status = WishlistStatus.LOADING.value
        self.updated_at = datetime.now(UTC)

        self.raise_(WishlistSessionStarted(wishlist_id=str(self.id), user_id=str(user_id)))

    def end_session(self):
        """The identity went away: empty the wishlist."""
        previous_user_id = self.user_id
        self._rebuild([])
        self.user_id = None
        self.last_error = None
        self.status = WishlistStatus.UNAUTHENTICATED.value
        self.updated_at = datetime.now(UTC)

        self.raise_(
            WishlistCleared(
                wishlist_id=str(self.id),
                previous_user_id=str(previous_user_id) if previous_user_id else None,
            )
        )

    def begin_loading(self):
        self._transition(WishlistStatus.LOADING)
        self.last_error = None

    def replace_items(self, entries):
        """Overwrite items wholesale with an authoritative snapshot."""
        self._transition(WishlistStatus.SYNCED)

        unique = []
        seen = set()
        for product, added_at in entries:
            product_id = str(product.product_id)
            if product_id in seen:
                continue
            seen.add(product_id)
            unique.append((product, added_at))

        self._rebuild(unique)
        self.last_error = None

        self.raise_(
            WishlistReplaced(
                wishlist_id=str(self.id),
                user_id=str(self.user_id) if self.user_id else None,
                item_count=len(unique),
            )
        )

    def load_failed(self, reason):
        """Initial load failed: leave the wishlist empty, not loading."""
        self._transition(WishlistStatus.ERROR)
        self._rebuild([])
        self.last_error = reason

        self.raise_(
            WishlistSyncFailed(
                wishlist_id=str(self.id),
                user_id=str(self.user_id) if self.user_id else None,
                operation="fetch_wishlist",
                reason=reason,
            )
        )

    def load_superseded(self, reason):
        """A fetch failed after the change feed had already synced: keep the items."""
        self.last_error = reason
        self.updated_at = datetime.now(UTC)

        self.raise_(
            WishlistSyncFailed(
                wishlist_id=str(self.id),
                user_id=str(self.user_id) if self.user_id else None,
                operation="fetch_wishlist",
                reason=reason,
            )
        )

    def write_failed(self, operation, reason):
        """Record a failed write. A load still in flight keeps the LOADING state."""
        if not self.is_loading:
            self._transition(WishlistStatus.ERROR)
        self.last_error = reason

        self.raise_(
            WishlistSyncFailed(
                wishlist_id=str(self.id),
                user_id=str(self.user_id) if self.user_id else None,
                operation=operation,
                reason=reason,
            )
        )

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_product(self, product, added_at=None):
        """Append a product. Returns False when it is already wishlisted."""
        if self.contains(product.product_id):
            return False

        added_at = added_at or datetime.now(UTC)
        self.add_items(WishlistItem(product=product, added_at=added_at))
        self.updated_at = datetime.now(UTC)

        self.raise_(
            WishlistItemAdded(
                wishlist_id=str(self.id),
                user_id=str(self.user_id) if self.user_id else None,
                product_id=str(product.product_id),
                added_at=added_at,
            )
        )
        return True

    def remove_product(self, product_id):
        """Remove a product.

        Returns ``(position, product, added_at)`` so the removal can be
        reverted, or None when the product was not wishlisted.
        """
        item = self.find_item(product_id)
        if item is None:
            return None

        position = list(self.items).index(item)
        removed = (position, item.product, item.added_at)
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            WishlistItemRemoved(
                wishlist_id=str(self.id),
                user_id=str(self.user_id) if self.user_id else None,
                product_id=str(product_id),
            )
        )
        return removed

    def revert_add(self, product_id, added_at):
        """Undo an optimistic add, unless a snapshot has since replaced it."""
        item = self.find_item(product_id)
        if item is None or item.added_at != added_at:
            return False

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            WishlistChangeReverted(
                wishlist_id=str(self.id),
                user_id=str(self.user_id) if self.user_id else None,
                product_id=str(product_id),
                operation="add_to_wishlist",
            )
        )
        return True

    def revert_remove(self, position, product, added_at):
        """Undo an optimistic removal by re-inserting at the original position."""
        if self.contains(product.product_id):
            return False

        entries = self.entries()
        entries.insert(min(position, len(entries)), (product, added_at))
        self._rebuild(entries)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            WishlistChangeReverted(
                wishlist_id=str(self.id),
                user_id=str(self.user_id) if self.user_id else None,
                product_id=str(product.product_id),
                operation="remove_from_wishlist",
            )
        )
        return True
