"""Low-level text helpers used by the query layer, mapper and feed.

No dependency on schemas, models, or any other project module.
"""

import unicodedata
from typing import Iterable, Optional


def normalize_whitespace(text: str) -> str:
    return " ".join((text or "").split()).strip()


def is_blank(text: Optional[str]) -> bool:
    return not normalize_whitespace(text or "")


def contains_ci(haystack: Optional[str], needle: str) -> bool:
    """Case-insensitive substring test; a missing haystack never matches."""
    if haystack is None:
        return False
    return needle.lower() in haystack.lower()


def join_tags(tags: Iterable[str]) -> str:
    return ",".join(tags)


def collation_key(text: Optional[str]) -> tuple[str, str]:
    """Locale-style ordering key: accents stripped and case folded, raw text breaks ties."""
    raw = text or ""
    decomposed = unicodedata.normalize("NFKD", raw)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), raw)
