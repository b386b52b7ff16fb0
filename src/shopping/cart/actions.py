"""Cart actions — the tagged variants a CartStore dispatches.

Every change to a cart goes through exactly one of these action types.
CartStore keeps a handler for each of them; dispatching anything else is a
programming error.
"""

from dataclasses import dataclass

from shopping.catalogue.product import Product


@dataclass(frozen=True)
class AddItem:
    product: Product
    size: str
    color: str
    quantity: int = 1


@dataclass(frozen=True)
class UpdateQuantity:
    key: str
    new_quantity: int


@dataclass(frozen=True)
class RemoveItem:
    key: str


@dataclass(frozen=True)
class ClearCart:
    pass


CART_ACTIONS = (AddItem, UpdateQuantity, RemoveItem, ClearCart)
