"""
Readers for text search terms.

Table requests carry every term as text. These helpers read a term as a
number, a date or a boolean; each returns None when the text is not of that
type. They are shared by the search builders in fasttable.api and the
predicate compiler in fasttable.db.
"""

import math
from datetime import datetime
from typing import Optional, Union

Number = Union[int, float]

_RADIX_PREFIXES = ("0x", "0o", "0b")
_TRUE_TERMS = {"true", "1"}
_FALSE_TERMS = {"false", "0"}


def parse_number(term: str) -> Optional[Number]:
    """
    Read a search term as a number.

    Accepts integers (including ``0x``/``0o``/``0b`` literals), decimals,
    exponents and ``Infinity``. Digit separators (``1_000``) are not numbers.

    Args:
        term: Search term

    Returns:
        int for integral terms, float otherwise, or None if the term is not numeric
    """
    text = term.strip()
    if not text or "_" in text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    if text[:2].lower() in _RADIX_PREFIXES:
        try:
            return int(text, 0)
        except ValueError:
            return None
    unsigned = text.lstrip("+-")
    if unsigned[:1].lower() in ("i", "n") and unsigned != "Infinity":
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if math.isnan(number):
        return None
    return number


def parse_date(term: str) -> Optional[datetime]:
    """
    Read a search term as an ISO-8601 date or datetime.

    Args:
        term: Search term, e.g. ``2024-03-01`` or ``2024-03-01T10:00:00Z``

    Returns:
        Parsed datetime, or None if the term is not a date
    """
    text = term.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def parse_bool(term: str) -> Optional[bool]:
    """Read ``true``/``false`` (or ``1``/``0``), case-insensitively."""
    text = term.strip().lower()
    if text in _TRUE_TERMS:
        return True
    if text in _FALSE_TERMS:
        return False
    return None
