"""Normalization helpers.

Centralizes tolerant parsing of loosely typed rows. None of these
helpers raise: unusable input maps to ``None`` (``safe_*``) or to the
field default (``coerce_*``).
"""

from __future__ import annotations

import json
import math
import unicodedata
from collections.abc import Iterable
from datetime import UTC, date, datetime
from typing import Any

_FALSE_STRINGS = frozenset({"false", "0", "no", "n", "off"})
_TRUE_STRINGS = frozenset({"true", "1", "yes", "y", "on", "sim"})


def safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def coerce_number(value: Any) -> float:
    """Parse a monetary/numeric column, falling back to ``0.0``."""
    parsed = safe_float(value)
    return 0.0 if parsed is None else parsed


def coerce_text(value: Any) -> str:
    """Render optional text as a string, ``None`` becoming ``""``."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def coerce_flag(value: Any, *, default: bool = False) -> bool:
    """Interpret a boolean-ish column.

    Only recognised spellings flip the result away from *default*, so a
    "defaults to true" column stays true for ``None``, missing or garbage
    values and only an explicit false makes it false.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _FALSE_STRINGS:
            return False
        if normalized in _TRUE_STRINGS:
            return True
    return default


def coerce_id(value: Any) -> int | str | None:
    """Normalize a primary key: digit strings become ints."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        return int(text) if text.isdigit() else text
    return None


def derive_initials(name: str) -> str:
    """First letter of the first two words, upper-cased (``"ana maria"`` -> ``"AM"``)."""
    words = [word for word in name.split() if word]
    return "".join(word[0] for word in words[:2]).upper()


def split_roles(value: Any) -> list[str]:
    """Split a role column into tags.

    Accepts comma-joined strings (``"Gerente, Financeiro"``), JSON list
    strings and real lists. Blank tags are dropped; order is kept.
    """
    items: Iterable[Any]
    if value is None:
        return []
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("["):
            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                decoded = None
            if isinstance(decoded, list):
                return split_roles(decoded)
        items = text.split(",")
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = value
    else:
        return []

    tags: list[str] = []
    for item in items:
        tag = coerce_text(item).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def utc_calendar_date(value: Any) -> date | None:
    """Extract the calendar date of a stored date/timestamp.

    Plain ``YYYY-MM-DD`` strings are read as calendar dates with no
    timezone shift. Timestamps carrying an offset are converted to UTC
    first; naive timestamps are taken as UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        return value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if len(text) == 10:
            try:
                return date.fromisoformat(text)
            except ValueError:
                return None
        try:
            moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            try:
                return date.fromisoformat(text[:10])
            except ValueError:
                return None
    else:
        return None

    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return moment.date()


def collation_key(value: str) -> tuple[str, str]:
    """Locale-style sort key: accent- and case-insensitive, then exact.

    ``"Ângela"`` sorts next to ``"Angela"`` rather than after ``"Zé"``.
    """
    decomposed = unicodedata.normalize("NFKD", value)
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    return folded, value
