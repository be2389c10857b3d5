"""Small string helpers shared by the API layer and the extractors."""

from __future__ import annotations

import re
from collections.abc import Iterable
from urllib.parse import urlparse

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE = re.compile(r"\s+")


def sanitize_text(value: str, max_length: int | None = None) -> str:
    """Strip control characters and collapse runs of whitespace."""
    cleaned = _WHITESPACE.sub(" ", _CONTROL_CHARS.sub(" ", value)).strip()
    if max_length is not None:
        cleaned = cleaned[:max_length]
    return cleaned


def is_valid_url(value: str | None) -> bool:
    if not value:
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def format_currency(amount: float, currency: str = "€") -> str:
    """Render amounts with K/M/B suffixes, e.g. 2_500_000 -> "€2.5M"."""
    for threshold, suffix in ((1e9, "B"), (1e6, "M"), (1e3, "K")):
        if abs(amount) >= threshold:
            return f"{currency}{amount / threshold:.1f}{suffix}"
    return f"{currency}{amount:.0f}"


def contains_suspicious_term(value: str, terms: Iterable[str]) -> bool:
    lowered = value.lower()
    return any(term.lower() in lowered for term in terms)
