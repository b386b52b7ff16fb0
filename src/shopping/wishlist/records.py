"""Wire schema for wishlist documents exchanged with the remote store."""

from datetime import datetime

from pydantic import BaseModel, Field

from shopping.catalogue.product import Product


class ProductRecord(BaseModel):
    product_id: str
    name: str
    price: float = Field(ge=0)
    sizes: list[str] = []
    colors: list[str] = []
    category: str | None = None
    image: str | None = None

    def to_product(self) -> Product:
        return Product.from_record(self.model_dump())


class WishlistRecord(BaseModel):
    """One wishlist document, stored under ``{user_id}_{product_id}``."""

    user_id: str
    product: ProductRecord
    added_at: datetime

    @property
    def document_id(self) -> str:
        return document_id(self.user_id, self.product.product_id)

    @classmethod
    def build(cls, user_id, product: Product, added_at: datetime) -> "WishlistRecord":
        return cls(
            user_id=str(user_id),
            product=ProductRecord(**product.to_record()),
            added_at=added_at,
        )

    def to_entry(self) -> tuple[Product, datetime]:
        return self.product.to_product(), self.added_at


def document_id(user_id, product_id) -> str:
    return f"{user_id}_{product_id}"
