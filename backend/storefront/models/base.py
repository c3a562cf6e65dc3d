# Overview: Generic single-table CRUD contract shared by every storefront model.

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, object_session

from ..case_utils import camel_to_snake, convert_to_case, snake_to_camel
from ..time_utils import to_utc_z


def _serialize(value: Any) -> Any:
    if isinstance(value, datetime):
        return to_utc_z(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


class CrudMixin:
    """
    create / read / read_all / update / delete over one table.

    The SQLAlchemy session is the pooled connection handle. It is passed in
    explicitly to the class-level operations and recovered from the instance
    (object_session) for the instance-level ones. Every operation commits on
    its own; no transaction spans two calls.
    """

    # Columns never exposed through to_dict()/props
    hidden_fields: frozenset[str] = frozenset()

    @classmethod
    def column_keys(cls) -> set[str]:
        return {c.key for c in cls.__mapper__.columns}

    @classmethod
    def _clean_props(cls, props: dict) -> dict:
        cleaned = convert_to_case(camel_to_snake, dict(props))
        unknown = set(cleaned) - cls.column_keys()
        if unknown:
            raise ValueError(f"Unknown {cls.__tablename__} field(s): {', '.join(sorted(unknown))}")
        cleaned.pop("id", None)
        return cleaned

    @classmethod
    def create(cls, session: Session, props: dict):
        row = cls(**cls._clean_props(props))
        session.add(row)
        try:
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        session.refresh(row)
        return row

    @classmethod
    def read(cls, session: Session, id: int):
        return session.get(cls, id)

    @classmethod
    def read_all(cls, session: Session) -> list:
        return list(session.scalars(sa.select(cls).order_by(cls.id)))

    def _session(self) -> Session:
        session = object_session(self)
        if session is None:
            raise RuntimeError(f"{type(self).__name__} is not attached to a session")
        return session

    def update(self, props: dict) -> None:
        """Set only the supplied fields, then re-sync the full snapshot from the row."""
        session = self._session()
        for key, value in self._clean_props(props).items():
            setattr(self, key, value)
        try:
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        session.refresh(self)

    def delete(self) -> bool:
        """True iff exactly one row was removed."""
        session = self._session()
        identity = sa.inspect(self).identity
        if not identity:
            return False
        model = type(self)
        stmt = (
            sa.delete(model)
            .where(model.id == identity[0])
            .execution_options(synchronize_session=False)
        )
        try:
            result = session.execute(stmt)
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        return result.rowcount == 1

    def to_dict(self) -> dict:
        return {
            key: _serialize(getattr(self, key))
            for key in sorted(self.column_keys(), key=lambda k: (k != "id", k))
            if key not in self.hidden_fields
        }

    @property
    def props(self) -> dict:
        """camelCase snapshot for response payloads."""
        return convert_to_case(snake_to_camel, self.to_dict())
