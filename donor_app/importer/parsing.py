"""
Value coercion helpers for spreadsheet and CSV donor imports.

Every helper is total: malformed input yields ``None`` or the caller-supplied
default instead of raising, so a single bad cell never aborts a row.
"""

from __future__ import annotations

import unicodedata
from datetime import date, datetime, timezone

# Integers above this are treated as Unix epoch seconds.
EPOCH_SECONDS_THRESHOLD = 1_000_000_000

TRUTHY_TOKENS = frozenset({"yes", "true", "1", "y"})

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%d-%b-%Y",
    "%b %d, %Y",
    "%B %d, %Y",
)

_CURRENCY_CHARACTERS = ("$", ",", " ", "\u00a0")


def normalize_text(value: object | None) -> str | None:
    """Strip and NFC-normalize text; blank values become ``None``."""

    if value is None:
        return None
    token = unicodedata.normalize("NFC", str(value)).strip()
    return token or None


def parse_date(value: object | None) -> datetime | None:
    """
    Parse a spreadsheet date cell.

    Integers above ``EPOCH_SECONDS_THRESHOLD`` are Unix timestamps; anything
    else goes through ISO-8601 and a handful of common formats. Values that
    match nothing (including small integers) become ``None``.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    text = str(value).strip()
    if not text or text == "0":
        return None

    epoch = _as_integer(value, text)
    if epoch is not None:
        if epoch > EPOCH_SECONDS_THRESHOLD:
            try:
                return datetime.fromtimestamp(epoch, tz=timezone.utc)
            except (OverflowError, OSError, ValueError):
                return None
        return None

    candidate = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        parsed = datetime.fromisoformat(candidate)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    return None


def _as_integer(value: object, text: str) -> int | None:
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if text.lstrip("-").isdigit():
        return int(text)
    return None


def parse_number(value: object | None, default: float = 0, *, minimum: float | None = None) -> float:
    """
    Parse a loosely formatted number (``"$1,250.50"``, ``" 40 "``, ``12``).

    Returns ``default`` for blank or unparseable input, and for values below
    ``minimum`` when one is given.
    """

    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        token = str(value).strip()
        for char in _CURRENCY_CHARACTERS:
            token = token.replace(char, "")
        if not token:
            return default
        try:
            number = float(token)
        except ValueError:
            return default
    if number != number or number in (float("inf"), float("-inf")):
        return default
    if minimum is not None and number < minimum:
        return default
    return number


def parse_boolean(value: object | None) -> bool:
    """Case-insensitive yes/true/1/y, or numeric 1, is ``True``; everything else is ``False``."""

    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    return str(value).strip().lower() in TRUTHY_TOKENS


def parse_tag_list(value: object | None) -> list[str]:
    """Split a comma or semicolon separated tag cell into distinct names."""

    text = normalize_text(value)
    if not text:
        return []
    tags: list[str] = []
    for raw in text.replace(";", ",").split(","):
        token = raw.strip()
        if token and token not in tags:
            tags.append(token)
    return tags
