import re
from typing import Optional

_INT_RE = re.compile(r"(\d+)")


def normalize_text(s: str) -> str:
    return " ".join((s or "").replace("\u00a0", " ").split())


def first_int(s: Optional[str]) -> Optional[int]:
    """'Show 245 venues' -> 245. None when the label carries no number."""
    m = _INT_RE.search(s or "")
    return int(m.group(1)) if m else None


def name_pattern(pattern: str) -> "re.Pattern[str]":
    # accessible-name patterns are always case-insensitive
    return re.compile(pattern, re.IGNORECASE)
