from __future__ import annotations
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Boolean, Date, DateTime, Enum, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .case_utils import camel_to_snake, convert_to_case
from .time_utils import parse_iso_date, parse_iso_datetime


# Maximum price: 99,999,999.99 (Numeric(10, 2))
MAX_PRICE = Decimal("99999999.99")

# Largest value a 32-bit INTEGER column holds
MAX_INT = 2**31 - 1

# bcrypt only hashes the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


class ValidationError(ValueError):
    """400-level input problem."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Typed boundary for one endpoint family:
    - writable_fields: what clients are allowed to set (snake_case column keys)
    - required_on_create: fields required for POST
    - ignored_fields: accepted in the payload but silently dropped
    """
    writable_fields: frozenset[str]
    required_on_create: frozenset[str] = frozenset()
    ignored_fields: frozenset[str] = frozenset()


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _check_int_range(field: str, value: int) -> int:
    if abs(value) > MAX_INT:
        raise ValidationError(f"{field} is out of range")
    return value


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        # Already an int (but not bool which is a subclass of int)
        if isinstance(value, int) and not isinstance(value, bool):
            return _check_int_range(col.key, value)
        # String input (HTML forms) - must be plain digits (with optional leading minus)
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValidationError(f"{col.key} must be an integer")
            if 'e' in stripped.lower():
                raise ValidationError(f"{col.key} must be a plain integer (scientific notation not allowed)")
            if '.' in stripped:
                raise ValidationError(f"{col.key} must be an integer (no decimals)")
            if not stripped.isascii():
                raise ValidationError(f"{col.key} must be an integer")
            try:
                parsed = int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer")
            return _check_int_range(col.key, parsed)
        if isinstance(value, float):
            raise ValidationError(f"{col.key} must be an integer, not a decimal")
        raise ValidationError(f"{col.key} must be an integer")

    # Money
    if isinstance(coltype, Numeric):
        if isinstance(value, bool):
            raise ValidationError(f"{col.key} must be a number")
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(f"{col.key} must be a number")
        if not amount.is_finite():
            raise ValidationError(f"{col.key} must be a number")
        return amount.quantize(Decimal("0.01"))

    # Booleans (HTML checkboxes post "on")
    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "on", "yes"}
        return bool(value)

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            if dt is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            return dt
        raise ValidationError(f"{col.key} must be a datetime")

    if isinstance(coltype, Date):
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                d = parse_iso_date(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 date")
            if d is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 date")
            return d
        raise ValidationError(f"{col.key} must be a date")

    # Enums before String: SQLAlchemy's Enum is a String subtype
    if isinstance(coltype, Enum):
        s = str(value).strip()
        if s not in coltype.enums:
            raise ValidationError(f"{col.key} must be one of: {', '.join(coltype.enums)}")
        return s

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes an incoming request body against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned snake_case patch dict with only writable fields.

    Payload keys may be camelCase (JSON clients) or snake_case (HTML forms).
    Empty strings from forms count as "not supplied".

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    payload = {
        k: v for k, v in convert_to_case(camel_to_snake, payload).items()
        if k not in policy.ignored_fields and k != "_method" and v != ""
    }

    if not partial:
        missing = sorted(f for f in policy.required_on_create if payload.get(f) is None)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        # NULL handling
        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    if patch.get("price") is not None:
        price = patch["price"]
        if price < 0:
            raise ValidationError("price must be >= 0")
        if price > MAX_PRICE:
            raise ValidationError(f"price cannot exceed {MAX_PRICE}")
    if patch.get("inventory") is not None and patch["inventory"] < 0:
        raise ValidationError("inventory must be >= 0")


def enforce_rules_order(patch: dict) -> None:
    if patch.get("total_price") is not None and patch["total_price"] < 0:
        raise ValidationError("total_price must be >= 0")


def enforce_rules_customer(patch: dict) -> None:
    password = patch.get("password")
    if password is not None and len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"password cannot be longer than {MAX_PASSWORD_BYTES} bytes")


def require_positive_quantity(value: Any, *, field: str = "quantity") -> int:
    """Cart quantities arrive outside any model policy; same strictness as Integer columns."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, str):
        stripped = value.strip()
        # int() also parses "+5", "1_000" and non-ASCII digits; only plain ASCII digits are accepted
        if not stripped.isascii() or not stripped.lstrip("-").isdigit():
            raise ValidationError(f"{field} must be an integer")
        try:
            value = int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    if not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer")
    if value <= 0:
        raise ValidationError(f"{field} must be > 0")
    return _check_int_range(field, value)
