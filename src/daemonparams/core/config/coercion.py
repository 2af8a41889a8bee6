"""Value coercion for resolved raw setting values."""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import timedelta
from pathlib import Path
from typing import Callable, Generic, Optional, TypeVar

from .errors import DurationParseFailure, IntegerParseFailure
from .platform import cygpath, is_cygwin
from .timeutils import to_duration as parse_duration

T = TypeVar("T")
U = TypeVar("U")

_INTEGER = re.compile(r"[+-]?[0-9]+")
_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1


class OptionalValue(Generic[T]):
    """Explicit presence or absence of a resolved value."""

    __slots__ = ("_value",)

    def __init__(self, value: Optional[T] = None):
        self._value = value

    @classmethod
    def of(cls, value: T) -> "OptionalValue[T]":
        if value is None:
            raise ValueError("OptionalValue.of() requires a value")
        return cls(value)

    @classmethod
    def empty(cls) -> "OptionalValue[T]":
        return cls(None)

    def is_present(self) -> bool:
        return self._value is not None

    def get(self) -> T:
        if self._value is None:
            raise LookupError("No value present")
        return self._value

    def or_else(self, other: Optional[T]) -> Optional[T]:
        return self._value if self._value is not None else other

    def map(self, function: Callable[[T], U]) -> "OptionalValue[U]":
        if self._value is None:
            return OptionalValue()
        return OptionalValue(function(self._value))

    def __bool__(self) -> bool:
        return self.is_present()

    def __eq__(self, other: object) -> bool:
        return isinstance(other, OptionalValue) and other._value == self._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        if self._value is None:
            return "OptionalValue.empty"
        return f"OptionalValue[{self._value!r}]"


def to_string(raw: Optional[str]) -> Optional[str]:
    return raw


def to_bool(raw: Optional[str]) -> bool:
    # An explicitly set but empty value switches the flag on.
    if raw is None:
        return False
    return raw == "" or raw.lower() == "true"


def to_int(raw: Optional[str], setting_name: str = "") -> int:
    """Parse a signed 32-bit decimal; whitespace or other characters are rejected."""
    if raw is None or not _INTEGER.fullmatch(raw):
        raise IntegerParseFailure(raw, setting_name)
    value = int(raw)
    if not _INT_MIN <= value <= _INT_MAX:
        raise IntegerParseFailure(raw, setting_name)
    return value


def to_duration(raw: Optional[str], setting_name: str = "") -> timedelta:
    try:
        return parse_duration(raw)
    except ValueError as exc:
        raise DurationParseFailure(raw, setting_name) from exc


def to_path(raw: Optional[str], environment: Optional[Mapping[str, str]] = None) -> Optional[Path]:
    if raw is None:
        return None
    if is_cygwin(environment):
        raw = cygpath(raw)
    return Path(raw)


def to_optional(raw: Optional[str]) -> OptionalValue[str]:
    return OptionalValue(raw)
