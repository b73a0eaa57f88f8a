"""
Cart error kinds, exceptions and the notification table.

Exceptions never leave a CartManager operation: they are raised inside the
operation and turned into a CartResult plus a user-facing notification at
its boundary.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

# Message keys (see locales/*.json)
MSG_STOCK_EXCEEDED = "cart.stock_exceeded"
MSG_ADD_FAILED = "cart.add_failed"
MSG_REMOVE_FAILED = "cart.remove_failed"
MSG_UPDATE_FAILED = "cart.update_failed"


class CartOperation(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    UPDATE = "update"


class CartErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    STOCK_EXCEEDED = "stock_exceeded"
    FAILED = "failed"  # transport failure or unexpected fault


# (operation, kind) -> message key
NOTIFICATION_KEYS: dict[tuple[CartOperation, CartErrorKind], str] = {
    (CartOperation.ADD, CartErrorKind.STOCK_EXCEEDED): MSG_STOCK_EXCEEDED,
    (CartOperation.ADD, CartErrorKind.NOT_FOUND): MSG_ADD_FAILED,
    (CartOperation.ADD, CartErrorKind.FAILED): MSG_ADD_FAILED,
    (CartOperation.REMOVE, CartErrorKind.NOT_FOUND): MSG_REMOVE_FAILED,
    (CartOperation.REMOVE, CartErrorKind.FAILED): MSG_REMOVE_FAILED,
    (CartOperation.UPDATE, CartErrorKind.STOCK_EXCEEDED): MSG_STOCK_EXCEEDED,
    (CartOperation.UPDATE, CartErrorKind.NOT_FOUND): MSG_UPDATE_FAILED,
    (CartOperation.UPDATE, CartErrorKind.FAILED): MSG_UPDATE_FAILED,
}

_FALLBACK_KEYS = {
    CartOperation.ADD: MSG_ADD_FAILED,
    CartOperation.REMOVE: MSG_REMOVE_FAILED,
    CartOperation.UPDATE: MSG_UPDATE_FAILED,
}


def notification_key(operation: CartOperation, kind: CartErrorKind) -> str:
    """Message key to show for a failed operation."""
    return NOTIFICATION_KEYS.get((operation, kind), _FALLBACK_KEYS[operation])


class CartError(Exception):
    """Base class for failures inside a cart operation."""

    kind = CartErrorKind.FAILED

    def __init__(self, product_id: Any, detail: str = ""):
        self.product_id = product_id
        self.detail = detail
        super().__init__(detail or f"{self.kind.value}: product {product_id}")


class ProductNotInCart(CartError):
    kind = CartErrorKind.NOT_FOUND

    def __init__(self, product_id: Any):
        super().__init__(product_id, f"product {product_id} is not in the cart")


class StockExceeded(CartError):
    kind = CartErrorKind.STOCK_EXCEEDED

    def __init__(self, product_id: Any, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(
            product_id,
            f"requested {requested} of product {product_id}, {available} in stock",
        )


class ServiceUnavailable(CartError):
    """The stock or catalog API could not answer."""


class StockUnavailable(ServiceUnavailable):
    pass


class CatalogUnavailable(ServiceUnavailable):
    pass


@dataclass(frozen=True)
class CartResult:
    """Outcome of a cart operation."""

    operation: CartOperation
    ok: bool
    kind: Optional[CartErrorKind] = None
    message: Optional[str] = None
    cart: tuple = field(default=(), repr=False)

    @classmethod
    def success(cls, operation: CartOperation, cart: tuple) -> "CartResult":
        return cls(operation=operation, ok=True, cart=cart)

    @classmethod
    def failure(
        cls, operation: CartOperation, kind: CartErrorKind, message: str, cart: tuple
    ) -> "CartResult":
        return cls(operation=operation, ok=False, kind=kind, message=message, cart=cart)

    def __bool__(self) -> bool:
        return self.ok
