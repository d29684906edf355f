"""
Defensive scalar parsing for loosely-typed SODA fields.

Every helper here is total: malformed input degrades to the supplied default
(or ``None``) and never raises.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_YEAR = re.compile(r"\b(19\d{2}|20\d{2})\b")

_DATE_FORMATS = (
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
    "%Y/%m/%d",
    "%Y-%m",
    "%Y / %m",
)


def parse_int(value: Any, default: int = 0) -> int:
    """Parse the leading integer of ``value`` (``"12.7"`` -> 12, ``"abc"`` -> default)."""
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value and value not in (float("inf"), float("-inf")) else default
    match = _INT_PREFIX.match(str(value))
    return int(match.group(1)) if match else default


def parse_float(value: Any, default: float = 0.0) -> float:
    """Parse the leading decimal of ``value``, tolerating ``%`` suffixes and thousands separators."""
    if value is None:
        return default
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = float(value)
        return number if number == number and abs(number) != float("inf") else default
    match = _FLOAT_PREFIX.match(str(value).replace(",", ""))
    if not match:
        return default
    try:
        number = float(match.group(1))
    except ValueError:
        return default
    return number if abs(number) != float("inf") else default


def parse_optional_float(value: Any) -> float | None:
    """Like ``parse_float`` but returns ``None`` when nothing numeric is present."""
    sentinel = float("nan")
    number = parse_float(value, sentinel)
    return None if number != number else number


def parse_date(value: Any) -> datetime | None:
    """Parse an ISO-8601 or common US-style date string into a naive datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    raw = str(value).strip()
    if not raw:
        return None
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        return parsed.replace(tzinfo=None)
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    return None


def extract_year(*values: Any) -> int | None:
    """Return the first plausible four-digit year found in ``values``."""
    for value in values:
        if value is None:
            continue
        parsed = parse_date(value)
        if parsed is not None:
            return parsed.year
        match = _YEAR.search(str(value))
        if match:
            return int(match.group(1))
    return None


def text(record: dict[str, str], field: str, default: str = "") -> str:
    """Stripped string value of ``field`` or ``default`` when missing/blank."""
    value = record.get(field)
    if value is None:
        return default
    value = str(value).strip()
    return value or default
