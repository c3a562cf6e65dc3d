from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.orm import Session

from ..extensions import db
from .base import CrudMixin


class Product(CrudMixin, db.Model):
    """
    Catalog entry. `url` is the product image; `date` is when it was listed.
    Deleting a category leaves its products uncategorized.
    """
    __tablename__ = "product"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    url = db.Column(db.String(2048), nullable=True)
    price = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    inventory = db.Column(db.Integer, nullable=False, default=0)
    category_id = db.Column(
        db.Integer, db.ForeignKey("category.id", ondelete="SET NULL"), nullable=True, index=True
    )
    date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    @classmethod
    def read_all(cls, session: Session, category_id: int | None = None) -> list["Product"]:
        stmt = sa.select(cls).order_by(cls.id)
        if category_id is not None:
            stmt = stmt.where(cls.category_id == category_id)
        return list(session.scalars(stmt))
