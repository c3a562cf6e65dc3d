# Overview: Service-layer operations for customer accounts shared by registration and admin CRUD.

from __future__ import annotations

from sqlalchemy.orm import Session as DbSession

from ..models import Customer
from ..validation import ModelValidationPolicy, enforce_rules_customer, validate_payload

CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({
        "email", "first_name", "last_name", "date_of_birth",
        "phone_number", "password", "user_name", "is_admin",
    }),
    required_on_create=frozenset({"email", "first_name", "last_name", "password"}),
    # Registration forms post a confirmation field and the "remember me" box
    ignored_fields=frozenset({"confirm_password", "remember"}),
)


def _strip_admin_flag(patch: dict, allow_admin: bool) -> dict:
    if not allow_admin:
        patch.pop("is_admin", None)
    return patch


def register_customer(db: DbSession, payload: dict, *, allow_admin: bool = False) -> Customer:
    """
    Validate a registration/creation body and insert the customer.

    is_admin is only honored when the caller is an admin (allow_admin=True).

    Raises:
        ValidationError: missing/malformed fields
        DuplicateEmailError: email already registered
    """
    patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=False)
    enforce_rules_customer(patch)
    _strip_admin_flag(patch, allow_admin)
    patch.setdefault("is_admin", False)
    return Customer.create(db, patch)


def update_customer(customer: Customer, payload: dict, *, allow_admin: bool = False) -> Customer:
    """Apply a partial update; only supplied fields change."""
    patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=True)
    enforce_rules_customer(patch)
    _strip_admin_flag(patch, allow_admin)
    if patch:
        customer.update(patch)
    return customer
