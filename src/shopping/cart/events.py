"""Domain events for the Cart aggregate."""

from protean.fields import Float, Identifier, Integer, String

from shopping.domain import shopping


@shopping.event(part_of="Cart")
class CartItemAdded:
    """A product variant was added to the cart, or merged into an existing line."""

    __version__ = 1

    cart_id = Identifier(required=True)
    key = String(required=True, max_length=512)
    product_id = Identifier(required=True)
    size = String(max_length=100)
    color = String(max_length=100)
    quantity = Integer(required=True)
    line_quantity = Integer(required=True)
    item_count = Integer(required=True)
    total = Float(required=True)


@shopping.event(part_of="Cart")
class CartQuantityUpdated:
    """The quantity of a cart line was set to a new value."""

    __version__ = 1

    cart_id = Identifier(required=True)
    key = String(required=True, max_length=512)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    item_count = Integer(required=True)
    total = Float(required=True)


@shopping.event(part_of="Cart")
class CartItemRemoved:
    """A line was removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    key = String(required=True, max_length=512)
    item_count = Integer(required=True)
    total = Float(required=True)


@shopping.event(part_of="Cart")
class CartCleared:
    """Every line was removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    lines_removed = Integer(required=True)
