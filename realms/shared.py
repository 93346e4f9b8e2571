"""Shared kernel: coercion helpers and tiny utilities.

Keep this small: formulas and calculators import from here so that every
number that reaches arithmetic has been guarded the same way.
"""
import logging
import math
from typing import Any, Dict, Mapping

logger = logging.getLogger("realms.shared")


class _Unset:
    """Marker for a value that was never provided (distinct from None)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


def to_number(value: Any, default: float = 0) -> float:
    """
    Coerces loosely typed input into a number.

    None, booleans, NaN/inf, empty strings and anything that does not parse
    as a float fall back to `default`. Integral floats are returned as ints so
    that display strings read "3" rather than "3.0".

    Args:
        value (Any): The raw value (int, float, numeric string, ...).
        default (float): The value used when coercion fails.

    Returns:
        float: The coerced number (an int when integral).
    """
    if value is None or value is UNSET or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return default
        try:
            number = float(text)
        except ValueError:
            logger.debug(f"Non-numeric value {value!r}, using {default}")
            return default
    else:
        return default

    if isinstance(number, float):
        if math.isnan(number) or math.isinf(number):
            return default
        if number.is_integer():
            return int(number)
    return number


def to_int(value: Any, default: int = 0) -> int:
    """Like to_number, truncated toward zero."""
    number = to_number(value, default)
    return int(number)


def get_field(obj: Any, key: str, default: Any = None) -> Any:
    """Reads `key` from a mapping or an attribute-bearing object."""
    if obj is None:
        return default
    if isinstance(obj, Mapping):
        value = obj.get(key, default)
    else:
        value = getattr(obj, key, default)
    if value is UNSET:
        return default
    return value


def as_dict(obj: Any) -> Dict[str, Any]:
    """
    Returns a plain dict view of a record.

    Pydantic models are dumped with only the fields that were actually set,
    so that defaults never masquerade as saved data.
    """
    if obj is None:
        return {}
    if hasattr(obj, "model_dump"):
        return obj.model_dump(exclude_unset=True)
    if isinstance(obj, Mapping):
        return dict(obj)
    return {}
