# backend/utils/parse.py
import math
from typing import Any

from backend.errors import ParseError


def parse_number(raw: Any) -> float:
    """Strictly parse an upstream numeric field (NearBlocks sends decimal strings)."""
    if raw is None or isinstance(raw, bool):
        raise ParseError(f"Not a number: {raw!r}")
    s = raw.strip() if isinstance(raw, str) else raw
    if s == "":
        raise ParseError("Empty numeric field")
    try:
        val = float(s)
    except (TypeError, ValueError) as e:
        raise ParseError(f"Not a number: {raw!r}") from e
    if math.isnan(val) or math.isinf(val):
        raise ParseError(f"Not a finite number: {raw!r}")
    return val


def parse_or_default(raw: Any, default: float = 0.0) -> float:
    """Parse an optional numeric field; anything unusable becomes `default` (0.0)."""
    try:
        return parse_number(raw)
    except ParseError:
        return default
