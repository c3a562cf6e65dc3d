from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.orm import Session

from ..case_utils import camel_to_snake, convert_to_case
from ..extensions import db
from ..time_utils import utcnow
from ..validation import ValidationError
from .base import CrudMixin

STATUS_INCOMPLETE = "incomplete"
STATUS_COMPLETE = "complete"
ORDER_STATUSES = (STATUS_INCOMPLETE, STATUS_COMPLETE)


class Order(CrudMixin, db.Model):
    """
    Placed order. Status only ever moves incomplete -> complete, through
    mark_complete() (which also stamps completed_at).
    """
    __tablename__ = "order"

    id = db.Column(db.Integer, primary_key=True)
    order_date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    total_price = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    status = db.Column(
        db.Enum(*ORDER_STATUSES, name="order_status", native_enum=False, create_constraint=True),
        nullable=False,
        default=STATUS_INCOMPLETE,
    )
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    customer_id = db.Column(
        db.Integer, db.ForeignKey("customer.id", ondelete="CASCADE"), nullable=False, index=True
    )
    address_id = db.Column(
        db.Integer, db.ForeignKey("address.id"), nullable=False, index=True
    )

    @property
    def is_complete(self) -> bool:
        return self.status == STATUS_COMPLETE

    @classmethod
    def read_all(cls, session: Session, customer_id: int | None = None) -> list["Order"]:
        stmt = sa.select(cls).order_by(cls.id)
        if customer_id is not None:
            stmt = stmt.where(cls.customer_id == customer_id)
        return list(session.scalars(stmt))

    def update(self, props: dict) -> None:
        status = convert_to_case(camel_to_snake, props).get("status")
        if status is not None and status not in ORDER_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(ORDER_STATUSES)}")
        if self.is_complete and status == STATUS_INCOMPLETE:
            raise ValidationError("A completed order cannot be reopened")
        super().update(props)

    def mark_complete(self) -> None:
        # Already complete: keep the first completion time.
        if self.is_complete:
            return
        self.update({"status": STATUS_COMPLETE, "completed_at": utcnow()})
