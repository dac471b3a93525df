import re
from typing import Callable, Optional, Pattern

_DISALLOWED = re.compile(r"[^a-z0-9\s]")


def query_tokens(text: str) -> list[str]:
    """Lowercased alphanumeric tokens of a free-text query."""
    return _DISALLOWED.sub("", (text or "").lower()).split()


def build_search_pattern(text: str) -> Optional[Pattern]:
    """
    Order-preserving subsequence pattern for a query.

    "Imagine Dragons - Believer!" -> imagine.*dragons.*believer (case-insensitive).
    Returns None when nothing searchable is left after cleaning.
    """
    tokens = query_tokens(text)
    if not tokens:
        return None
    return re.compile(".*".join(tokens), re.IGNORECASE)


def build_matcher(text: str) -> Callable[[Optional[str], Optional[str]], bool]:
    pattern = build_search_pattern(text)

    def matches(title: Optional[str], artist: Optional[str]) -> bool:
        if pattern is None:
            return False
        return bool(pattern.search(title or "") or pattern.search(artist or ""))

    return matches
