# Overview: Shopping cart aggregate (shopping_cart + shopping_cart_item rows).

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ..case_utils import convert_to_case, snake_to_camel
from ..extensions import db
from .base import CrudMixin, _serialize


def cart_total(items: Iterable["CartItem"]) -> Decimal:
    """sum(quantity * unit_price), the only place a cart total is computed."""
    return sum(
        (Decimal(item.quantity) * Decimal(item.unit_price) for item in items),
        Decimal("0.00"),
    ).quantize(Decimal("0.01"))


class CartItem(CrudMixin, db.Model):
    """One (cart, product) line with the unit price captured when it was added."""
    __tablename__ = "shopping_cart_item"
    __table_args__ = (
        db.UniqueConstraint("shopping_cart_id", "product_id", name="uq_shopping_cart_item_cart_product"),
    )

    id = db.Column(db.Integer, primary_key=True)
    shopping_cart_id = db.Column(
        db.Integer, db.ForeignKey("shopping_cart.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id = db.Column(
        db.Integer, db.ForeignKey("product.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quantity = db.Column(db.Integer, nullable=False, default=1)
    unit_price = db.Column(db.Numeric(10, 2), nullable=False)
    added_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    product = db.relationship("Product", lazy="joined")

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.product is not None:
            data.update(
                title=self.product.title,
                url=self.product.url,
                description=self.product.description,
                product_price=_serialize(self.product.price),
            )
        return data


class Cart(CrudMixin, db.Model):
    """
    A customer's cart. The active cart is the one not yet linked to an order;
    the partial unique index keeps that to one per customer, which is what
    makes get_or_create() safe under concurrent requests.
    """
    __tablename__ = "shopping_cart"
    __table_args__ = (
        db.Index(
            "uq_shopping_cart_active_customer",
            "customer_id",
            unique=True,
            sqlite_where=sa.text("order_id IS NULL"),
            postgresql_where=sa.text("order_id IS NULL"),
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(
        db.Integer, db.ForeignKey("customer.id", ondelete="CASCADE"), nullable=False, index=True
    )
    order_id = db.Column(
        db.Integer, db.ForeignKey("order.id", ondelete="CASCADE"), nullable=True, unique=True
    )
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now()
    )

    items = db.relationship(
        "CartItem",
        order_by="CartItem.id",
        lazy="select",
        passive_deletes=True,
    )

    @classmethod
    def read_by_customer_id(cls, session: Session, customer_id: int) -> "Cart | None":
        """Active cart with its lines and their product fields, in one query."""
        stmt = (
            sa.select(cls)
            .where(cls.customer_id == customer_id, cls.order_id.is_(None))
            .options(joinedload(cls.items).joinedload(CartItem.product))
        )
        return session.scalars(stmt).unique().first()

    @classmethod
    def read_by_order_id(cls, session: Session, order_id: int) -> "Cart | None":
        stmt = (
            sa.select(cls)
            .where(cls.order_id == order_id)
            .options(joinedload(cls.items).joinedload(CartItem.product))
        )
        return session.scalars(stmt).unique().first()

    @classmethod
    def get_or_create(cls, session: Session, customer_id: int) -> "Cart":
        cart = cls.read_by_customer_id(session, customer_id)
        if cart is not None:
            return cart
        try:
            return cls.create(session, {"customer_id": customer_id})
        except IntegrityError:
            # A concurrent request created it first.
            cart = cls.read_by_customer_id(session, customer_id)
            if cart is None:
                raise
            return cart

    @property
    def total(self) -> Decimal:
        return cart_total(self.items)

    def _item_filter(self, product_id: int):
        return sa.and_(CartItem.shopping_cart_id == self.id, CartItem.product_id == product_id)

    def _commit(self, session: Session) -> None:
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise

    def find_item(self, product_id: int) -> CartItem | None:
        return next((item for item in self.items if item.product_id == product_id), None)

    def add_item(self, product_id: int, quantity: int, unit_price: Decimal) -> CartItem:
        """
        Increment the existing line for product_id, or insert a new one.
        The increment is a single UPDATE so concurrent adds are not lost.
        """
        session = self._session()
        increment = (
            sa.update(CartItem)
            .where(self._item_filter(product_id))
            .values(quantity=CartItem.quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        if session.execute(increment).rowcount == 0:
            session.add(CartItem(
                shopping_cart_id=self.id,
                product_id=product_id,
                quantity=quantity,
                unit_price=unit_price,
            ))
            try:
                session.commit()
            except IntegrityError:
                # Lost the insert race for this (cart, product); fold into the winner's row.
                session.rollback()
                session.execute(increment)
                self._commit(session)
        else:
            self._commit(session)

        # Commit expired self.items; the next access reloads the lines.
        return self.find_item(product_id)

    def update_item(self, product_id: int, quantity: int) -> bool:
        session = self._session()
        stmt = (
            sa.update(CartItem)
            .where(self._item_filter(product_id))
            .values(quantity=quantity)
            .execution_options(synchronize_session=False)
        )
        updated = session.execute(stmt).rowcount
        self._commit(session)
        return updated == 1

    def remove_item(self, product_id: int) -> bool:
        session = self._session()
        stmt = (
            sa.delete(CartItem)
            .where(self._item_filter(product_id))
            .execution_options(synchronize_session=False)
        )
        removed = session.execute(stmt).rowcount
        self._commit(session)
        return removed == 1

    def clear(self) -> bool:
        session = self._session()
        stmt = (
            sa.delete(CartItem)
            .where(CartItem.shopping_cart_id == self.id)
            .execution_options(synchronize_session=False)
        )
        removed = session.execute(stmt).rowcount
        self._commit(session)
        return removed > 0

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["items"] = [item.to_dict() for item in self.items]
        data["total"] = _serialize(self.total)
        return data

    @property
    def props(self) -> dict:
        data = convert_to_case(snake_to_camel, self.to_dict())
        data["items"] = [item.props for item in self.items]
        return data
