"""Cart aggregate figures: item count and merchandise total."""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from protean.fields import Float, Integer

from shopping.domain import shopping


@shopping.value_object(part_of="Cart")
class CartTotals:
    """Derived totals of a cart, excluding shipping and tax.

    ``total`` keeps full float precision; rounding happens only when the
    amount is formatted for display.
    """

    item_count = Integer(default=0, min_value=0)
    total = Float(default=0.0, min_value=0.0)


def recompute(items: Iterable) -> CartTotals:
    """Sum quantities and ``price × quantity`` over cart line items."""
    item_count = 0
    total = 0.0
    for item in items:
        item_count += item.quantity
        total += item.product.price * item.quantity
    return CartTotals(item_count=item_count, total=total)


def format_money(amount: float, places: int = 2) -> str:
    """Round half-up to ``places`` decimals for display."""
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(str(amount)).quantize(quantum, rounding=ROUND_HALF_UP))
