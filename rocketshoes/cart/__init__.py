"""Cart package: models, storage, and manager."""
from .models import Cart, CartLine, deserialize_cart, find_line, serialize_cart
from .service import CartManager, create_cart_manager, load_cart
from .storage import (
    CartStorage,
    FileCartStorage,
    MemoryCartStorage,
    RedisCartStorage,
    create_storage,
)

__all__ = [
    "Cart",
    "CartLine",
    "CartManager",
    "CartStorage",
    "FileCartStorage",
    "MemoryCartStorage",
    "RedisCartStorage",
    "create_cart_manager",
    "create_storage",
    "deserialize_cart",
    "find_line",
    "load_cart",
    "serialize_cart",
]
