"""Cart manager: the three cart operations over an owned in-memory cart."""
import asyncio
from contextlib import asynccontextmanager
from typing import Callable, Optional

from rocketshoes import config
from rocketshoes.api import ShopApi
from rocketshoes.errors import (
    CartError,
    CartErrorKind,
    CartOperation,
    CartResult,
    CatalogUnavailable,
    ProductNotInCart,
    StockExceeded,
    notification_key,
)
from rocketshoes.i18n import get_text
from rocketshoes.logging import get_logger
from rocketshoes.notifications import LoggingNotifier, Notifier, notify_error

from .models import Cart, CartLine, deserialize_cart, find_line, serialize_cart
from .storage import CartStorage, create_storage

logger = get_logger(__name__)

CartListener = Callable[[Cart], None]


async def load_cart(storage: CartStorage, key: str = config.CART_STORAGE_KEY) -> Cart:
    """Read the stored snapshot; anything unreadable gives an empty cart."""
    try:
        data = await storage.get(key)
    except Exception as e:
        logger.error(f"Failed to read cart snapshot, starting empty: {e}", exc_info=True)
        return ()

    if not data:
        return ()

    try:
        return deserialize_cart(data)
    except ValueError as e:
        logger.warning(f"Corrupted cart snapshot, starting empty: {e}")
        return ()


class CartManager:
    """
    Owns the cart and applies add / remove / update-quantity to it.

    Features:
    - Stock check against the API before every quantity increase
    - Snapshot written to storage after every successful mutation
    - Failures reported through the notifier, never raised
    - Optional per-product serialization of operations
    - Listeners called with the new cart after each mutation
    """

    def __init__(
        self,
        api: ShopApi,
        storage: CartStorage,
        notifier: Notifier,
        cart: Cart = (),
        storage_key: str = config.CART_STORAGE_KEY,
        language: str = config.LANGUAGE,
        serialize_mutations: bool = config.CART_SERIALIZE_MUTATIONS,
    ):
        self.api = api
        self.storage = storage
        self.notifier = notifier
        self.storage_key = storage_key
        self.language = language
        self.serialize_mutations = serialize_mutations
        self._cart: Cart = tuple(cart)
        self._listeners: list[CartListener] = []
        self._locks: dict[int, asyncio.Lock] = {}
        self._lock_users: dict[int, int] = {}
        self._write_lock = asyncio.Lock()

    @classmethod
    async def load(
        cls, api: ShopApi, storage: CartStorage, notifier: Notifier, **kwargs
    ) -> "CartManager":
        """Create a manager seeded from the stored snapshot."""
        key = kwargs.get("storage_key", config.CART_STORAGE_KEY)
        cart = await load_cart(storage, key)
        logger.info(f"Loaded cart with {len(cart)} line(s)")
        return cls(api, storage, notifier, cart, **kwargs)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def cart(self) -> Cart:
        return self._cart

    @property
    def cart_size(self) -> int:
        """Number of distinct products in the cart."""
        return len(self._cart)

    def get_line(self, product_id: int) -> Optional[CartLine]:
        return find_line(self._cart, product_id)

    def amounts(self) -> dict[int, int]:
        """Quantity in the cart per product id."""
        return {line.id: line.amount for line in self._cart}

    def summary(self) -> dict:
        """Cart summary for display."""
        return {
            "is_empty": not self._cart,
            "cart_size": self.cart_size,
            "total_units": sum(line.amount for line in self._cart),
            "items": [line.to_dict() for line in self._cart],
        }

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Call `listener(cart)` after each successful mutation.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def add_product(self, product_id: int) -> CartResult:
        """Add one unit of a product, or a first line for it."""
        try:
            async with self._guard(product_id):
                stock = await self.api.get_stock(product_id)

                line = find_line(self._cart, product_id)
                if line is not None:
                    requested = line.amount + 1
                    if requested > stock.amount:
                        raise StockExceeded(product_id, requested, stock.amount)
                    await self._commit(self._replace(line.with_amount(requested)))
                    logger.info(f"Product {product_id} amount raised to {requested}")
                else:
                    # First unit: stock is not checked, the catalog is
                    product = await self.api.get_product(product_id)
                    if product.id != product_id:
                        raise CatalogUnavailable(
                            product_id, f"catalog answered with product {product.id}"
                        )
                    await self._commit(self._cart + (CartLine.from_product(product),))
                    logger.info(f"Product {product_id} added to cart")
        except Exception as e:
            return self._fail(CartOperation.ADD, e)

        return CartResult.success(CartOperation.ADD, self._cart)

    async def remove_product(self, product_id: int) -> CartResult:
        """Drop the line of a product.

        Makes no lookups but is a coroutine because the snapshot write is
        awaited. Calling it without `await` removes nothing.
        """
        try:
            async with self._guard(product_id):
                if find_line(self._cart, product_id) is None:
                    raise ProductNotInCart(product_id)
                await self._commit(tuple(line for line in self._cart if line.id != product_id))
                logger.info(f"Product {product_id} removed from cart")
        except Exception as e:
            return self._fail(CartOperation.REMOVE, e)

        return CartResult.success(CartOperation.REMOVE, self._cart)

    async def update_product_amount(self, product_id: int, amount: int) -> CartResult:
        """Set the quantity of a product already in the cart."""
        try:
            async with self._guard(product_id):
                if find_line(self._cart, product_id) is None:
                    raise ProductNotInCart(product_id)
                if not isinstance(amount, int) or isinstance(amount, bool):
                    raise CartError(product_id, f"amount must be an integer, got {amount!r}")

                stock = await self.api.get_stock(product_id)
                if amount <= 0 or amount > stock.amount:
                    raise StockExceeded(product_id, amount, stock.amount)

                # The line may have been removed while the lookup was pending
                line = find_line(self._cart, product_id)
                if line is None:
                    raise ProductNotInCart(product_id)
                await self._commit(self._replace(line.with_amount(amount)))
                logger.info(f"Product {product_id} amount set to {amount}")
        except Exception as e:
            return self._fail(CartOperation.UPDATE, e)

        return CartResult.success(CartOperation.UPDATE, self._cart)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _guard(self, product_id: int):
        if not self.serialize_mutations:
            yield
            return
        lock = self._locks.setdefault(product_id, asyncio.Lock())
        self._lock_users[product_id] = self._lock_users.get(product_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            # Drop the lock once nobody holds or waits on it
            self._lock_users[product_id] -= 1
            if not self._lock_users[product_id]:
                del self._lock_users[product_id]
                del self._locks[product_id]

    def _replace(self, new_line: CartLine) -> Cart:
        return tuple(new_line if line.id == new_line.id else line for line in self._cart)

    async def _commit(self, cart: Cart) -> None:
        """Install a new cart, persist it and inform listeners."""
        self._cart = cart
        await self._persist()
        for listener in list(self._listeners):
            try:
                listener(cart)
            except Exception as e:
                logger.warning(f"Cart listener failed: {e}", exc_info=True)

    async def _persist(self) -> None:
        # Serialized at write time so the last write always carries the latest cart
        async with self._write_lock:
            try:
                await self.storage.set(self.storage_key, serialize_cart(self._cart))
            except Exception as e:
                logger.error(f"Failed to save cart snapshot: {e}", exc_info=True)

    def _fail(self, operation: CartOperation, error: Exception) -> CartResult:
        if isinstance(error, CartError):
            kind = error.kind
            if kind == CartErrorKind.FAILED:
                logger.error(f"Cart {operation.value} failed: {error}")
            else:
                logger.warning(f"Cart {operation.value} rejected: {error}")
        else:
            kind = CartErrorKind.FAILED
            logger.error(f"Unexpected error during cart {operation.value}: {error}", exc_info=True)

        message = get_text(notification_key(operation, kind), self.language)
        notify_error(self.notifier, message)
        return CartResult.failure(operation, kind, message, self._cart)


async def create_cart_manager(
    api: Optional[ShopApi] = None,
    storage: Optional[CartStorage] = None,
    notifier: Optional[Notifier] = None,
) -> CartManager:
    """Wire a manager from configuration; explicit collaborators win."""
    return await CartManager.load(
        api if api is not None else ShopApi(),
        storage if storage is not None else create_storage(),
        notifier if notifier is not None else LoggingNotifier(),
    )
