"""Cart item management — commands and handler."""

from dataclasses import dataclass

import structlog

from catalogue.listing.port import CatalogPort
from ordering.cart.cart import Cart
from ordering.cart.repository import CartRepository
from shared.db import Database
from shared.errors import CatalogItemUnavailable, NotFoundError, ValidationError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SetCartItem:
    """Put ``quantity`` of a variant in the cart, replacing any previous quantity."""

    user_id: int
    product_id: int
    variant_id: int
    quantity: int


@dataclass(frozen=True)
class RemoveFromCart:
    user_id: int
    product_id: int
    variant_id: int


class ManageCartItemsHandler:
    def __init__(self, database: Database, catalog: CatalogPort, carts: CartRepository) -> None:
        self._db = database
        self._catalog = catalog
        self._carts = carts

    def set_item(self, command: SetCartItem) -> Cart:
        if not isinstance(command.quantity, int) or isinstance(command.quantity, bool) or command.quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be a positive integer"]})

        entry = self._catalog.lookup(command.product_id, command.variant_id)
        if entry is None:
            raise CatalogItemUnavailable(command.product_id, command.variant_id)

        with self._db.unit_of_work() as tx:
            self._carts.put_item(
                tx,
                command.user_id,
                command.product_id,
                command.variant_id,
                command.quantity,
                price_estimate=entry.unit_price * command.quantity,
            )
            cart = self._carts.get(tx, command.user_id)

        logger.debug(
            "Cart item set",
            user_id=command.user_id,
            product_id=command.product_id,
            variant_id=command.variant_id,
            quantity=command.quantity,
        )
        return cart

    def remove_item(self, command: RemoveFromCart) -> Cart:
        with self._db.unit_of_work() as tx:
            removed = self._carts.remove_item(tx, command.user_id, command.product_id, command.variant_id)
            if not removed:
                raise NotFoundError("cart_item", f"{command.product_id}/{command.variant_id}")
            return self._carts.get(tx, command.user_id)

    def view(self, user_id: int) -> Cart:
        with self._db.unit_of_work() as tx:
            return self._carts.get(tx, user_id)
