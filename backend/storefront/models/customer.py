from __future__ import annotations

import bcrypt
import sqlalchemy as sa
from flask import current_app
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import DuplicateEmailError, InvalidCredentialsError
from ..extensions import db
from .base import CrudMixin


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt. Cost factor comes from BCRYPT_ROUNDS
    (default 12; tests lower it to keep the suite fast).
    """
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash (e.g. a row written outside the app)
        return False


class Customer(CrudMixin, db.Model):
    """
    Registered shopper. Email is globally unique; is_admin unlocks catalog
    management and cross-customer views.
    """
    __tablename__ = "customer"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True)
    first_name = db.Column(db.String(128), nullable=False)
    last_name = db.Column(db.String(128), nullable=False)
    date_of_birth = db.Column(db.Date, nullable=True)
    phone_number = db.Column(db.String(32), nullable=True)
    user_name = db.Column(db.String(64), nullable=True)

    # Bcrypt hashed password
    password = db.Column(db.String(255), nullable=False)

    is_admin = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    hidden_fields = frozenset({"password"})

    @classmethod
    def create(cls, session: Session, props: dict) -> "Customer":
        props = cls._clean_props(props)
        if props.get("email"):
            props["email"] = props["email"].strip().lower()
        if props.get("password"):
            props["password"] = hash_password(props["password"])
        try:
            return super().create(session, props)
        except IntegrityError:
            if cls.read_by_email(session, props.get("email")) is not None:
                raise DuplicateEmailError()
            raise

    @classmethod
    def read_by_email(cls, session: Session, email: str | None) -> "Customer | None":
        if not email:
            return None
        return session.scalars(
            sa.select(cls).where(cls.email == email.strip().lower())
        ).first()

    @classmethod
    def login(cls, session: Session, email: str, password: str) -> "Customer":
        customer = cls.read_by_email(session, email)
        if customer is None or not verify_password(password or "", customer.password):
            raise InvalidCredentialsError()
        return customer

    def update(self, props: dict) -> None:
        props = self._clean_props(props)
        if props.get("email"):
            props["email"] = props["email"].strip().lower()
        if props.get("password"):
            props["password"] = hash_password(props["password"])
        try:
            super().update(props)
        except IntegrityError:
            if "email" in props:
                raise DuplicateEmailError()
            raise
