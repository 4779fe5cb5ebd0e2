from __future__ import annotations

from ..core.exceptions import MalformedInputError, ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise MalformedInputError(f"{field_name} is required")
    return str(value).strip()


def require_positive_amount(value, field_name: str) -> float:
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise MalformedInputError(f"{field_name} must be a number")
    if amount <= 0:
        raise ValidationError(f"{field_name} must be greater than zero")
    return amount
