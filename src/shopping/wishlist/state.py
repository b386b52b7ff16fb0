"""Immutable wishlist snapshots handed to consumers of the WishlistStore."""

from dataclasses import dataclass, field
from datetime import datetime

from shopping.catalogue.product import Product


@dataclass(frozen=True)
class WishlistEntry:
    product: Product
    added_at: datetime

    @property
    def product_id(self) -> str:
        return str(self.product.product_id)


@dataclass(frozen=True)
class WishlistState:
    items: tuple[WishlistEntry, ...] = field(default_factory=tuple)
    is_loading: bool = False
    status: str = "Unauthenticated"
    user_id: str | None = None
    last_error: str | None = None

    @property
    def product_ids(self) -> list[str]:
        return [entry.product_id for entry in self.items]

    @classmethod
    def from_wishlist(cls, wishlist) -> "WishlistState":
        return cls(
            items=tuple(WishlistEntry(product=product, added_at=added_at) for product, added_at in wishlist.entries()),
            is_loading=wishlist.is_loading,
            status=wishlist.status,
            user_id=str(wishlist.user_id) if wishlist.user_id else None,
            last_error=wishlist.last_error,
        )
