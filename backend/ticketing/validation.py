from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import Integer, Numeric, String, Text, DateTime
from sqlalchemy.orm import DeclarativeMeta

from .errors import InvalidRequest
from .time_utils import parse_iso_datetime


# Upper bound on ticket price; keeps Numeric(10, 2) from overflowing
MAX_PRICE = Decimal("99999999.99")

# Integer columns are 32-bit signed on every supported database
MIN_INT = -(2 ** 31)
MAX_INT = 2 ** 31 - 1

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MIN_PASSWORD_LENGTH = 6
# bcrypt only looks at the first 72 bytes; longer input is rejected up front
MAX_PASSWORD_BYTES = 72

MAX_TICKETS_PER_PURCHASE = 10


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats, bools and scientific notation
    if isinstance(coltype, Integer):
        if isinstance(value, bool):
            raise InvalidRequest(f"{col.key} must be an integer")
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped or not re.fullmatch(r"-?\d+", stripped):
                raise InvalidRequest(f"{col.key} must be an integer")
            try:
                value = int(stripped)
            except ValueError:
                raise InvalidRequest(f"{col.key} is out of range")
        if not isinstance(value, int):
            raise InvalidRequest(f"{col.key} must be an integer")
        if value < MIN_INT or value > MAX_INT:
            raise InvalidRequest(f"{col.key} is out of range")
        return value

    # Decimals (money)
    if isinstance(coltype, Numeric):
        if isinstance(value, bool):
            raise InvalidRequest(f"{col.key} must be a number")
        if isinstance(value, (int, float, str)):
            try:
                number = Decimal(str(value).strip())
            except InvalidOperation:
                raise InvalidRequest(f"{col.key} must be a number")
            if not number.is_finite():
                raise InvalidRequest(f"{col.key} must be a number")
            return number
        raise InvalidRequest(f"{col.key} must be a number")

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise InvalidRequest(f"{col.key} must be an ISO-8601 datetime")
            if dt is None:
                raise InvalidRequest(f"{col.key} must be an ISO-8601 datetime")
            return dt
        raise InvalidRequest(f"{col.key} must be an ISO-8601 datetime")

    if isinstance(coltype, (String, Text)):
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            raise InvalidRequest(f"{col.key} must be a string")
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    Unknown keys are ignored rather than rejected; clients routinely echo
    back read-only fields such as id or created_at.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise InvalidRequest("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if payload.get(f) in (None, ""))
        if missing:
            raise InvalidRequest(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)
    patch: dict = {}

    for k, raw in payload.items():
        if k not in policy.writable_fields or k not in cols:
            continue
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise InvalidRequest(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise InvalidRequest(f"{k} cannot be blank")

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise InvalidRequest(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def enforce_rules_event(patch: dict) -> None:
    """Business rules for events that column metadata does not capture."""
    if "capacity" in patch and patch["capacity"] < 1:
        raise InvalidRequest("capacity must be at least 1")

    if "price" in patch:
        price = patch["price"]
        if price < 0:
            raise InvalidRequest("price must be >= 0")
        if price > MAX_PRICE:
            raise InvalidRequest(f"price cannot exceed {MAX_PRICE}")
        patch["price"] = price.quantize(Decimal("0.01"))


def normalize_email(email: Any) -> str:
    if not isinstance(email, str) or not email.strip():
        raise InvalidRequest("email is required")
    normalized = email.strip().lower()
    if not EMAIL_RE.match(normalized):
        raise InvalidRequest("email must be a valid email address")
    return normalized


def validate_password(password: Any) -> str:
    if not isinstance(password, str) or not password:
        raise InvalidRequest("password is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidRequest(f"password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise InvalidRequest(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return password


def parse_quantity(value: Any, *, maximum: int) -> int:
    """Ticket quantity: a plain integer in 1..maximum."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRequest("quantity must be an integer")
    if value < 1 or value > maximum:
        raise InvalidRequest(f"quantity must be between 1 and {maximum}")
    return value
