"""Time literal parsing and formatting for duration settings."""

from __future__ import annotations

import re
from datetime import timedelta

_COMPOUND = re.compile(
    r"^\s*"
    r"(?:(?P<days>\d+)\s*d(?:ays?)?)?\s*"
    r"(?:(?P<hours>\d+)\s*h(?:ours?)?)?\s*"
    r"(?:(?P<minutes>\d+)\s*m(?:in(?:utes?)?)?(?![a-z]))?\s*"
    r"(?:(?P<seconds>\d+)\s*s(?:ec(?:onds?)?)?)?\s*"
    r"(?:(?P<millis>\d+)\s*ms(?:ecs?)?)?"
    r"\s*$",
    re.IGNORECASE,
)

_ISO = re.compile(
    r"^P(?:(?P<days>\d+(?:\.\d+)?)D)?"
    r"(?:T(?:(?P<hours>\d+(?:\.\d+)?)H)?"
    r"(?:(?P<minutes>\d+(?:\.\d+)?)M)?"
    r"(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$",
    re.IGNORECASE,
)


def to_duration(literal: str) -> timedelta:
    """
    Parse a time literal.

    Accepts compound literals such as ``10s``, ``5m``, ``1d2h``, ``3 hours``
    or ``1m30s500ms``, ISO-8601 durations such as ``PT10S``, and bare
    integers, which are milliseconds.

    Raises:
        ValueError: If the literal matches none of these forms or is too
            large for a timedelta.
    """
    if literal is None:
        raise ValueError("Duration literal is missing")
    text = literal.strip()
    if not text:
        raise ValueError("Duration literal is empty")
    try:
        return _parse(literal, text)
    except OverflowError:
        raise ValueError(f"Duration out of range: {literal!r}") from None


def _parse(literal: str, text: str) -> timedelta:
    if text.isdigit():
        return timedelta(milliseconds=int(text))
    if text[0] in "Pp":
        match = _ISO.match(text)
        if match and any(match.groupdict().values()) and not text.upper().endswith("T"):
            return timedelta(
                **{unit: float(amount) for unit, amount in match.groupdict().items() if amount}
            )
        raise ValueError(f"Invalid ISO-8601 duration: {literal!r}")
    match = _COMPOUND.match(text)
    if match is None or not any(match.groupdict().values()):
        raise ValueError(f"Invalid duration: {literal!r}")
    parts = {unit: int(amount) for unit, amount in match.groupdict().items() if amount}
    millis = parts.pop("millis", 0)
    return timedelta(milliseconds=millis, **parts)


def format_duration(duration: timedelta) -> str:
    """Render a duration in the compound form, e.g. ``1d2h3m4s5ms``."""
    total_ms = int(round(duration.total_seconds() * 1000))
    if total_ms == 0:
        return "0ms"
    sign = "-" if total_ms < 0 else ""
    total_ms = abs(total_ms)
    out = []
    for suffix, size in (("d", 86_400_000), ("h", 3_600_000), ("m", 60_000), ("s", 1000), ("ms", 1)):
        amount, total_ms = divmod(total_ms, size)
        if amount:
            out.append(f"{amount}{suffix}")
    return sign + "".join(out)
