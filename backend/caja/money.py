"""
Money helpers: user-entered currency text <-> integer cents.

All amounts inside the system are integer cents. Floats only exist for the
instant between parsing user text and rounding it.
"""

from __future__ import annotations

import math
import re

# Leading numeric prefix, the same way a lenient float parser reads "12.5abc" as 12.5
_NUMBER_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_STRIP_RE = re.compile(r"[$\s]")


def parse_money_to_cents(text: str | None) -> int:
    """
    Parse "$1,234.56", "19,99", " 7 " and similar into integer cents.

    - "$" and whitespace are removed
    - a lone comma is a decimal comma; with both "," and "." present every
      comma is a thousands separator, so "1,234.56" is 123456, not the 123 a
      first-comma-to-dot swap would give; this keeps
      parse_money_to_cents(format_cents(c)) == c
    - rounds half up to the nearest cent
    - anything unparsable (None, "", "abc", "nan") returns 0
    """
    if text is None:
        return 0

    clean = _STRIP_RE.sub("", str(text))
    if "," in clean and "." in clean:
        clean = clean.replace(",", "")
    else:
        clean = clean.replace(",", ".", 1)

    match = _NUMBER_RE.match(clean)
    if not match:
        return 0

    value = float(match.group(0))
    if not math.isfinite(value):
        return 0

    return int(math.floor(value * 100 + 0.5))


def format_cents(cents: int, symbol: str = "$") -> str:
    """Format integer cents as "$1,234.56" ("$-12.50" for negatives)."""
    sign = "-" if cents < 0 else ""
    units, remainder = divmod(abs(int(cents)), 100)
    return f"{symbol}{sign}{units:,}.{remainder:02d}"
