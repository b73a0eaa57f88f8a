"""Pytest configuration and fixtures"""
import asyncio
import os
from typing import Optional
from unittest.mock import AsyncMock, Mock

import pytest

# Set test environment variables before the package reads them
os.environ.setdefault("CART_STORAGE", "memory")
os.environ.setdefault("ROCKETSHOES_LANGUAGE", "pt")
os.environ.setdefault("ROCKETSHOES_API_RETRY_ATTEMPTS", "3")
os.environ.setdefault("CART_SERIALIZE_MUTATIONS", "1")

from rocketshoes.cart import CartLine, CartManager, MemoryCartStorage  # noqa: E402
from rocketshoes.errors import CatalogUnavailable, StockUnavailable  # noqa: E402
from rocketshoes.models import Product, Stock  # noqa: E402
from rocketshoes.notifications import Notifier  # noqa: E402

STORAGE_KEY = "@RocketShoes:cart"

MSG_STOCK_EXCEEDED = "Quantidade solicitada fora de estoque"
MSG_ADD_FAILED = "Erro na adição do produto"
MSG_REMOVE_FAILED = "Erro na remoção do produto"
MSG_UPDATE_FAILED = "Erro na alteração de quantidade do produto"


class RecordingNotifier(Notifier):
    """Keeps every message it is asked to show."""

    def __init__(self):
        self.messages: list[str] = []

    def error(self, message: str) -> None:
        self.messages.append(message)


def make_line(product_id: int, amount: int, **extra) -> CartLine:
    data = {
        "id": product_id,
        "title": f"Tênis {product_id}",
        "price": 179.9,
        "image": f"https://cdn.example.com/shoes/{product_id}.jpg",
        "amount": amount,
    }
    data.update(extra)
    return CartLine.model_validate(data)


@pytest.fixture
def stock() -> dict[int, int]:
    """Available amount per product id; tests may change it."""
    return {1: 10, 2: 5, 3: 0, 5: 4}


@pytest.fixture
def products() -> dict[int, dict]:
    return {
        product_id: {
            "id": product_id,
            "title": f"Tênis {product_id}",
            "price": 139.9 + product_id,
            "image": f"https://cdn.example.com/shoes/{product_id}.jpg",
        }
        for product_id in (1, 2, 3, 5)
    }


@pytest.fixture
def mock_api(stock, products):
    """Stock/catalog API double.

    Each lookup yields to the event loop once, like a real request, so
    concurrent operations interleave.
    """
    api = Mock()

    async def get_stock(product_id):
        await asyncio.sleep(0)
        if product_id not in stock:
            raise StockUnavailable(product_id, "404 Not Found")
        return Stock(id=product_id, amount=stock[product_id])

    async def get_product(product_id):
        await asyncio.sleep(0)
        if product_id not in products:
            raise CatalogUnavailable(product_id, "404 Not Found")
        return Product.model_validate(products[product_id])

    api.get_stock = AsyncMock(side_effect=get_stock)
    api.get_product = AsyncMock(side_effect=get_product)
    return api


@pytest.fixture
def storage() -> MemoryCartStorage:
    return MemoryCartStorage()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_manager(mock_api, storage, notifier):
    """Build a CartManager around the shared doubles."""

    def _make(lines: Optional[list[CartLine]] = None, **kwargs) -> CartManager:
        kwargs.setdefault("language", "pt")
        kwargs.setdefault("serialize_mutations", True)
        return CartManager(mock_api, storage, notifier, tuple(lines or ()), **kwargs)

    return _make
