# Overview: Service-layer operations for carts: add-or-increment and checkout.

"""
Cart workflows that touch more than one table.

CONCURRENCY: the active cart is found-or-created through a unique index
(Cart.get_or_create) and line quantities are incremented in SQL
(Cart.add_item), so two simultaneous "add" requests from the same customer
cannot lose an update or insert a duplicate line. Checkout links the cart
with a conditional UPDATE so a cart can back at most one order.
"""

from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DbSession

from ..errors import NotFoundError
from ..models import Address, Cart, Order, Product, STATUS_INCOMPLETE
from ..time_utils import utcnow
from ..validation import ValidationError


def add_to_cart(db: DbSession, customer_id: int, product_id: int, quantity: int) -> Cart:
    """
    Add `quantity` of a product to the customer's active cart, capturing the
    product's current price as the line's unit price.

    Raises NotFoundError if the product does not exist.
    """
    product = Product.read(db, product_id)
    if product is None:
        raise NotFoundError("Product")

    cart = Cart.get_or_create(db, customer_id)
    cart.add_item(product.id, quantity, product.price)
    return cart


def checkout(db: DbSession, customer_id: int, address_id: int) -> Order:
    """
    Turn the active cart into an incomplete order totalling cart.total.

    Raises:
        ValidationError: cart missing/empty, or already checked out concurrently
        NotFoundError: address missing or owned by someone else
    """
    cart = Cart.read_by_customer_id(db, customer_id)
    if cart is None or not cart.items:
        raise ValidationError("Cart is empty")

    address = Address.read(db, address_id)
    if address is None or address.customer_id != customer_id:
        raise NotFoundError("Address")

    order = Order(
        order_date=utcnow(),
        total_price=cart.total,
        status=STATUS_INCOMPLETE,
        customer_id=customer_id,
        address_id=address.id,
    )
    try:
        db.add(order)
        db.flush()  # ensure order.id exists before linking the cart
        linked = db.execute(
            sa.update(Cart)
            .where(Cart.id == cart.id, Cart.order_id.is_(None))
            .values(order_id=order.id)
            .execution_options(synchronize_session=False)
        ).rowcount
        if linked != 1:
            db.rollback()
            raise ValidationError("Cart was already checked out")
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(order)
    return order
