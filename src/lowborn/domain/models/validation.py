from __future__ import annotations

import math
from enum import Enum
from typing import Any, Iterable, Mapping, Type, TypeVar

from lowborn.domain.errors import StateValidationError

E = TypeVar("E", bound=Enum)


def require_int(name: str, value: Any, low: int, high: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise StateValidationError(f"{name} must be an integer, got {value!r}.")
    if value < low or value > high:
        raise StateValidationError(f"{name} must be within [{low}, {high}], got {value}.")


def require_stat(name: str, value: Any) -> None:
    require_int(name, value, 0, 100)


def require_unit_float(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise StateValidationError(f"{name} must be a number, got {value!r}.")
    if not math.isfinite(value) or value < 0 or value > 1:
        raise StateValidationError(f"{name} must be within [0, 1], got {value}.")


def require_text(name: str, value: Any) -> None:
    if not isinstance(value, str) or not value:
        raise StateValidationError(f"{name} must be a non-empty string.")


def require_optional_text(name: str, value: Any) -> None:
    if value is not None and not isinstance(value, str):
        raise StateValidationError(f"{name} must be a string or None.")


def require_enum(name: str, value: Any, enum_type: Type[E]) -> None:
    if not isinstance(value, enum_type):
        raise StateValidationError(f"{name} must be a {enum_type.__name__}, got {value!r}.")


def require_tuple(name: str, value: Any, *, min_length: int = 0) -> None:
    if not isinstance(value, tuple):
        raise StateValidationError(f"{name} must be a tuple.")
    if len(value) < min_length:
        raise StateValidationError(f"{name} needs at least {min_length} item(s).")


def require_delta(name: str, delta: Any, allowed_keys: Iterable[str]) -> None:
    if not isinstance(delta, Mapping):
        raise StateValidationError(f"{name} must be a mapping of stat deltas.")
    allowed = set(allowed_keys)
    for key, value in delta.items():
        if key not in allowed:
            raise StateValidationError(f"{name} has unknown stat '{key}'.")
        require_int(f"{name}.{key}", value, -100, 100)


def coerce_enum(enum_type: Type[E], value: Any) -> E:
    """Parse a raw wire value into ``enum_type`` or fail loudly."""

    try:
        return enum_type(value)
    except ValueError as exc:
        raise StateValidationError(f"Unknown {enum_type.__name__} value {value!r}.") from exc
