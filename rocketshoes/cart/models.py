"""Cart line model and snapshot (de)serialization."""
import json
from typing import Iterable, Optional

from pydantic import ConfigDict, Field

from rocketshoes.models import Product


class CartLine(Product):
    """A product in the cart with its quantity.

    Lines are frozen: a quantity change produces a new line via `with_amount`.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    amount: int = Field(gt=0)

    @classmethod
    def from_product(cls, product: Product, amount: int = 1) -> "CartLine":
        """Copy the catalog's product details into a new line."""
        data = product.model_dump(exclude_unset=True)
        data["amount"] = amount
        return cls.model_validate(data)

    def with_amount(self, amount: int) -> "CartLine":
        return self.model_copy(update={"amount": amount})

    def to_dict(self) -> dict:
        """Convert to the dictionary stored in the snapshot."""
        return self.model_dump(mode="json", exclude_unset=True)


Cart = tuple[CartLine, ...]


def find_line(cart: Iterable[CartLine], product_id: int) -> Optional[CartLine]:
    return next((line for line in cart if line.id == product_id), None)


def serialize_cart(cart: Iterable[CartLine]) -> str:
    """Snapshot text: the JSON array of lines."""
    return json.dumps([line.to_dict() for line in cart], ensure_ascii=False)


def deserialize_cart(text: str) -> Cart:
    """
    Parse a snapshot.

    Raises:
        ValueError: the text is not a JSON array of valid, unique lines
            (pydantic's ValidationError and JSONDecodeError are ValueErrors)
    """
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError(f"cart snapshot must be a JSON array, got {type(data).__name__}")

    cart = tuple(CartLine.model_validate(item) for item in data)

    seen: set[int] = set()
    for line in cart:
        if line.id in seen:
            raise ValueError(f"duplicate line for product {line.id} in cart snapshot")
        seen.add(line.id)

    return cart
