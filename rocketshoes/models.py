"""API models - Pydantic models for stock and catalog responses."""
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Stock(BaseModel):
    """Stock record returned by `GET stock/{id}`."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    amount: int


class Product(BaseModel):
    """Product record returned by `GET products/{id}`.

    Only `id` is typed. Everything else the catalog sends (title, price,
    image, ...) is kept as-is, so a product is copied verbatim into the cart.
    """

    model_config = ConfigDict(extra="allow")

    id: int
