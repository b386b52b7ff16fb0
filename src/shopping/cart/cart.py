"""Cart aggregate — session-local shopping cart with merge-by-variant lines.

The cart is never persisted remotely. Each line is identified by its line
item key (product, size, color); adding the same variant again merges into
the existing line. Item count and total are derived values: they are
recomputed as the last step of every mutation and never assigned directly.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Integer, String, ValueObject

from shopping.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from shopping.cart.keys import line_item_key, normalize_option
from shopping.cart.totals import CartTotals, recompute
from shopping.catalogue.product import Product
from shopping.domain import shopping


@shopping.entity(part_of="Cart")
class CartLineItem:
    key = String(required=True, max_length=512)
    product = ValueObject(Product, required=True)
    size = String(max_length=100)
    color = String(max_length=100)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@shopping.aggregate
class Cart:
    session_id = String(max_length=255)
    items = HasMany(CartLineItem)
    totals = ValueObject(CartTotals)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, session_id=None):
        now = datetime.now(UTC)
        return cls(
            session_id=session_id,
            totals=CartTotals(item_count=0, total=0.0),
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Derived figures
    # -------------------------------------------------------------------
    @property
    def item_count(self) -> int:
        return self.totals.item_count if self.totals else 0

    @property
    def total(self) -> float:
        return self.totals.total if self.totals else 0.0

    def _recompute_totals(self):
        self.totals = recompute(self.items)
        self.updated_at = datetime.now(UTC)

    def find_item(self, key):
        return next((i for i in self.items if i.key == key), None)

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_item(self, product, size, color, quantity=1):
        """Add a variant to the cart, or increase the quantity of its line."""
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity to add must be at least 1"]})

        size = normalize_option(size)
        color = normalize_option(color)
        key = line_item_key(product.product_id, size, color)

        existing = self.find_item(key)
        if existing:
            existing.quantity += quantity
            line_quantity = existing.quantity
        else:
            self.add_items(
                CartLineItem(
                    key=key,
                    product=product,
                    size=size,
                    color=color,
                    quantity=quantity,
                    added_at=datetime.now(UTC),
                )
            )
            line_quantity = quantity

        self._recompute_totals()

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                key=key,
                product_id=str(product.product_id),
                size=size,
                color=color,
                quantity=quantity,
                line_quantity=line_quantity,
                item_count=self.item_count,
                total=self.total,
            )
        )
        return key

    def update_quantity(self, key, new_quantity):
        """Set a line's quantity exactly. Zero or less removes the line.

        Unknown keys are ignored. Returns True when the cart changed.
        """
        if new_quantity is None or new_quantity <= 0:
            return self.remove_item(key)

        item = self.find_item(key)
        if item is None or item.quantity == new_quantity:
            return False

        previous_quantity = item.quantity
        item.quantity = new_quantity
        self._recompute_totals()

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                key=key,
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
                item_count=self.item_count,
                total=self.total,
            )
        )
        return True

    def remove_item(self, key):
        """Remove a line if present. Returns True when the cart changed."""
        item = self.find_item(key)
        if item is None:
            return False

        self.remove_items(item)
        self._recompute_totals()

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                key=key,
                item_count=self.item_count,
                total=self.total,
            )
        )
        return True

    def clear(self):
        """Remove every line. Returns True when the cart changed."""
        lines = list(self.items)
        for item in lines:
            self.remove_items(item)
        self._recompute_totals()

        if not lines:
            return False

        self.raise_(CartCleared(cart_id=str(self.id), lines_removed=len(lines)))
        return True
