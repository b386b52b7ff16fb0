"""Immutable cart snapshots handed to consumers of the CartStore."""

from dataclasses import dataclass, field

from shopping.cart.totals import format_money
from shopping.catalogue.product import Product


@dataclass(frozen=True)
class CartLine:
    key: str
    product: Product
    size: str
    color: str
    quantity: int

    @property
    def line_total(self) -> float:
        return self.product.price * self.quantity


@dataclass(frozen=True)
class CartState:
    items: tuple[CartLine, ...] = field(default_factory=tuple)
    item_count: int = 0
    total: float = 0.0

    @property
    def display_total(self) -> str:
        return format_money(self.total)

    def line(self, key: str) -> CartLine | None:
        return next((line for line in self.items if line.key == key), None)

    @classmethod
    def from_cart(cls, cart) -> "CartState":
        return cls(
            items=tuple(
                CartLine(
                    key=item.key,
                    product=item.product,
                    size=item.size or "",
                    color=item.color or "",
                    quantity=item.quantity,
                )
                for item in cart.items
            ),
            item_count=cart.item_count,
            total=cart.total,
        )
