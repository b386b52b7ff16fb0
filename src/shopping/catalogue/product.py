"""Product value object and the read-only catalogue collaborator.

Products are owned by the catalogue and never change once loaded. Carts and
wishlists embed the value object as-is, so a line item always shows the
price the shopper saw when it was added.
"""

from collections.abc import Iterable, Mapping

from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, List, String

from shopping.domain import shopping


@shopping.value_object
class Product:
    """An immutable catalogue product."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    sizes = List(content_type=String)
    colors = List(content_type=String)
    category = String(max_length=100)
    image = String(max_length=1024)

    @property
    def default_size(self) -> str | None:
        return self.sizes[0] if self.sizes else None

    @property
    def default_color(self) -> str | None:
        return self.colors[0] if self.colors else None

    @classmethod
    def from_record(cls, record: Mapping) -> "Product":
        """Build a product from a catalogue record (``id`` or ``product_id`` key)."""
        product_id = record.get("product_id", record.get("id"))
        return cls(
            product_id=str(product_id) if product_id is not None else None,
            name=record.get("name"),
            price=record.get("price"),
            sizes=list(record.get("sizes") or []),
            colors=list(record.get("colors") or []),
            category=record.get("category"),
            image=record.get("image"),
        )

    def to_record(self) -> dict:
        return {
            "product_id": str(self.product_id),
            "name": self.name,
            "price": self.price,
            "sizes": list(self.sizes or []),
            "colors": list(self.colors or []),
            "category": self.category,
            "image": self.image,
        }


class Catalogue:
    """Read-only lookup over the loaded products, in catalogue order."""

    def __init__(self, products: Iterable[Product] = ()):
        self._products: dict[str, Product] = {}
        for product in products:
            self._products[str(product.product_id)] = product

    @classmethod
    def from_records(cls, records: Iterable[Mapping]) -> "Catalogue":
        return cls(Product.from_record(record) for record in records)

    def all(self) -> list[Product]:
        return list(self._products.values())

    def get(self, product_id) -> Product:
        try:
            return self._products[str(product_id)]
        except KeyError:
            raise ObjectNotFoundError(f"Product `{product_id}` does not exist in the catalogue") from None

    def __contains__(self, product_id) -> bool:
        return str(product_id) in self._products

    def __len__(self) -> int:
        return len(self._products)
