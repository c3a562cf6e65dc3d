from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.orm import Session

from ..extensions import db
from .base import CrudMixin


class Address(CrudMixin, db.Model):
    __tablename__ = "address"

    id = db.Column(db.Integer, primary_key=True)
    street_number = db.Column(db.Integer, nullable=False)
    civic_number = db.Column(db.Integer, nullable=True)
    street_name = db.Column(db.String(255), nullable=False)
    city = db.Column(db.String(128), nullable=False)
    province = db.Column(db.String(128), nullable=False)
    country = db.Column(db.String(128), nullable=False)
    postal_code = db.Column(db.String(16), nullable=False)
    customer_id = db.Column(
        db.Integer, db.ForeignKey("customer.id", ondelete="CASCADE"), nullable=False, index=True
    )

    @classmethod
    def read_all(cls, session: Session, customer_id: int | None = None) -> list["Address"]:
        stmt = sa.select(cls).order_by(cls.id)
        if customer_id is not None:
            stmt = stmt.where(cls.customer_id == customer_id)
        return list(session.scalars(stmt))
