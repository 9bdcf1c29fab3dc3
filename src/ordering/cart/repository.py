"""Repository for carts and their line items."""

from decimal import Decimal

from sqlalchemy import and_, delete, insert, or_, select, update

from ordering.cart.cart import Cart, CartLineItem
from shared.db import Transaction, as_utc, utcnow
from shared.schema import cart_line_items, carts


class CartRepository:
    def _cart_id(self, tx: Transaction, user_id: int) -> int | None:
        return tx.execute(select(carts.c.id).where(carts.c.user_id == user_id)).scalar()

    def _ensure_cart(self, tx: Transaction, user_id: int) -> int:
        cart_id = self._cart_id(tx, user_id)
        if cart_id is None:
            cart_id = tx.execute(insert(carts).values(user_id=user_id, created_at=utcnow())).inserted_primary_key[0]
        return cart_id

    def get(self, tx: Transaction, user_id: int) -> Cart:
        """Return the user's cart; an empty one if they never added anything."""
        cart_id = self._cart_id(tx, user_id)
        if cart_id is None:
            return Cart(id=None, user_id=user_id)
        rows = tx.execute(
            select(cart_line_items).where(cart_line_items.c.cart_id == cart_id).order_by(cart_line_items.c.id)
        )
        items = [
            CartLineItem(
                id=row.id,
                product_id=row.product_id,
                variant_id=row.variant_id,
                quantity=row.quantity,
                price_estimate=Decimal(row.price_estimate),
                updated_at=as_utc(row.updated_at),
            )
            for row in rows
        ]
        return Cart(id=cart_id, user_id=user_id, items=items)

    def put_item(
        self,
        tx: Transaction,
        user_id: int,
        product_id: int,
        variant_id: int,
        quantity: int,
        price_estimate: Decimal,
    ) -> None:
        """Insert the line, or overwrite quantity and estimate if it exists."""
        cart_id = self._ensure_cart(tx, user_id)
        now = utcnow()
        result = tx.execute(
            update(cart_line_items)
            .where(
                cart_line_items.c.cart_id == cart_id,
                cart_line_items.c.product_id == product_id,
                cart_line_items.c.variant_id == variant_id,
            )
            .values(quantity=quantity, price_estimate=price_estimate, updated_at=now)
        )
        if result.rowcount == 0:
            tx.execute(
                insert(cart_line_items).values(
                    cart_id=cart_id,
                    product_id=product_id,
                    variant_id=variant_id,
                    quantity=quantity,
                    price_estimate=price_estimate,
                    updated_at=now,
                )
            )

    def remove_item(self, tx: Transaction, user_id: int, product_id: int, variant_id: int) -> bool:
        cart_id = self._cart_id(tx, user_id)
        if cart_id is None:
            return False
        result = tx.execute(
            delete(cart_line_items).where(
                cart_line_items.c.cart_id == cart_id,
                cart_line_items.c.product_id == product_id,
                cart_line_items.c.variant_id == variant_id,
            )
        )
        return result.rowcount > 0

    def remove_converted(self, tx: Transaction, user_id: int, lines: list[tuple[int, int, int]]) -> int:
        """Delete the lines that were turned into an order.

        ``lines`` holds (product_id, variant_id, quantity). A cart line whose
        quantity changed after checkout read it was not what got ordered, so
        it stays.
        """
        cart_id = self._cart_id(tx, user_id)
        if cart_id is None or not lines:
            return 0
        result = tx.execute(
            delete(cart_line_items).where(
                cart_line_items.c.cart_id == cart_id,
                or_(
                    *(
                        and_(
                            cart_line_items.c.product_id == product_id,
                            cart_line_items.c.variant_id == variant_id,
                            cart_line_items.c.quantity == quantity,
                        )
                        for product_id, variant_id, quantity in lines
                    )
                ),
            )
        )
        return result.rowcount
