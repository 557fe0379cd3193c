"""Text helpers for key index pages and key loading statements."""

from __future__ import annotations

import base64
from datetime import datetime, timezone
from urllib.parse import quote_plus

# Comparable moment standing for "never expires".
NEVER_EXPIRES = datetime(9999, 12, 31, 23, 59, 59, tzinfo=timezone.utc)

_ALGORITHM_CODES = {1: "R", 2: "R", 3: "R", 16: "g", 17: "D"}


def _unix(t: datetime) -> int:
    if t.tzinfo is None:
        t = t.replace(tzinfo=timezone.utc)
    return int(t.timestamp())


def fingerprint_format(fp: str) -> str:
    """Group a fingerprint in fours, with a wider gap halfway through a 40-digit one."""
    full_length = len(fp.encode("utf-8")) == 40
    parts: list[str] = []
    offset = 0
    for char in fp:
        if offset > 0:
            if offset % 4 == 0:
                parts.append(" ")
            if offset % 20 == 0 and full_length:
                parts.append(" ")
        parts.append(char)
        offset += len(char.encode("utf-8"))
    return "".join(parts)


def escape_colons(s: str) -> str:
    """Escape colons for machine-readable index output."""
    return s.replace(":", "\\x3a")


def algorithm_code(algorithm: int) -> str:
    """One-letter code for a public key algorithm, or the number in brackets."""
    return _ALGORITHM_CODES.get(algorithm, f"[{algorithm}]")


def expunix(t: datetime) -> str:
    """Seconds since the epoch, or empty for a time that never expires."""
    seconds = _unix(t)
    if seconds == _unix(NEVER_EXPIRES):
        return ""
    return str(seconds)


def date_format(t: datetime) -> str:
    """ISO calendar date, or empty for a time that never expires."""
    if _unix(t) == _unix(NEVER_EXPIRES):
        return ""
    return t.strftime("%Y-%m-%d")


def blank(s: str) -> str:
    """Underscores in place of an empty value."""
    return s if s else "__________"


def imgsrcdata(data: bytes) -> str:
    """Base64 image data, escaped for use in a query string."""
    return quote_plus(base64.b64encode(data).decode("ascii"))


def insert_select_from(sql: str, table: str, where: str, bulk: bool) -> str:
    """Complete an INSERT .. SELECT statement, guarding against duplicates unless bulk loading."""
    if not bulk:
        sql = f"{sql} WHERE NOT EXISTS (SELECT 1 FROM {table} WHERE {where})"
    return sql