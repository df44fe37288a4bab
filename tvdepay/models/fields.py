"""Coercion helpers for loosely typed record store documents."""

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Type, TypeVar

E = TypeVar("E", bound=Enum)

ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """
    Convert a monetary value to Decimal.

    None, NaN, infinities, booleans and anything unparseable become zero.
    Floats go through repr() so 450.50 stays 450.5 instead of its binary
    expansion.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    else:
        if isinstance(value, float):
            value = repr(value)
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return ZERO
    if not result.is_finite():
        return ZERO
    return result


def to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y", "sim")
    return bool(value)


def parse_enum(enum_cls: Type[E], value: Any) -> Optional[E]:
    """Resolve an enum member from an instance, its value or its name."""
    if value is None:
        return None
    if isinstance(value, enum_cls):
        return value
    for member in enum_cls:
        if value == member.value or (isinstance(value, str) and value.upper() == member.name):
            return member
    return None


def pick(data: Mapping[str, Any], keys: Sequence[str]) -> Any:
    """Return the first non-None value found under any of the given keys."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None
