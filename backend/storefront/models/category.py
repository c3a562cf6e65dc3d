from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import DuplicateCategoryError
from ..extensions import db
from .base import CrudMixin


class Category(CrudMixin, db.Model):
    __tablename__ = "category"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False, unique=True)

    @classmethod
    def create(cls, session: Session, props: dict) -> "Category":
        try:
            return super().create(session, props)
        except IntegrityError:
            raise DuplicateCategoryError(props.get("name", ""))

    def update(self, props: dict) -> None:
        try:
            super().update(props)
        except IntegrityError:
            raise DuplicateCategoryError(props.get("name", ""))
