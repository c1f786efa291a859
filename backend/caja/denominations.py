"""
Denomination count maps.

A count map is a plain ``dict[int, int]`` from face value (whole currency
units) to quantity. The set of face values is fixed and small, so maps are
validated against it and always iterated largest-first. JSON text only
appears at the persistence edge: a flat object with decimal-string keys and
integer values, e.g. ``{"1000": 2, "500": 1}``.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping

from .errors import InvalidMovementError, MalformedStateError

DENOMINATIONS: tuple[int, ...] = (1000, 500, 200, 100, 50, 20, 10, 5)

# Largest movement total a signed 64-bit INTEGER column can hold
MAX_MOVEMENT_CENTS = 2**63 - 1


def _coerce_denomination(key: Any, allowed: Iterable[int]) -> int:
    if isinstance(key, bool):
        raise InvalidMovementError(f"Unknown denomination: {key!r}", details={"denomination": str(key)})
    try:
        denom = int(str(key).strip())
    except (TypeError, ValueError):
        raise InvalidMovementError(f"Unknown denomination: {key!r}", details={"denomination": str(key)})
    if denom not in allowed:
        raise InvalidMovementError(f"Unknown denomination: {denom}", details={"denomination": denom})
    return denom


def _coerce_quantity(denom: int, value: Any) -> int:
    # bool is an int subclass; reject it along with floats such as 1.5
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidMovementError(
            f"Quantity for ${denom} must be a whole number",
            details={"denomination": denom, "quantity": value},
        )
    if value < 0:
        raise InvalidMovementError(
            f"Quantity for ${denom} cannot be negative",
            details={"denomination": denom, "quantity": value},
        )
    return value


def normalize_delta(delta: Mapping[Any, Any], allowed: Iterable[int] = DENOMINATIONS) -> dict[int, int]:
    """
    Validate a user-supplied movement delta.

    Keys may be ints or decimal strings. Zero quantities are dropped; the
    result is ordered like ``allowed``.
    """
    allowed = tuple(allowed)
    if not isinstance(delta, Mapping):
        raise InvalidMovementError("Denominations must be a mapping of denomination to quantity")

    parsed: dict[int, int] = {}
    for key, value in delta.items():
        denom = _coerce_denomination(key, allowed)
        qty = _coerce_quantity(denom, value)
        parsed[denom] = parsed.get(denom, 0) + qty

    result = {d: parsed[d] for d in allowed if parsed.get(d)}
    check_movement_total(result)
    return result


def check_movement_total(counts: Mapping[int, int]) -> int:
    """Total of a movement in cents; InvalidMovementError when it cannot be stored."""
    amount = total_cents(counts)
    if amount > MAX_MOVEMENT_CENTS:
        raise InvalidMovementError(
            "Movement total is too large",
            details={"total_cents": amount, "max_cents": MAX_MOVEMENT_CENTS},
        )
    return amount


def ordered(counts: Mapping[int, int]) -> dict[int, int]:
    """Largest face value first."""
    return dict(sorted(counts.items(), key=lambda item: -item[0]))


def total_cents(counts: Mapping[int, int]) -> int:
    return sum(denom * 100 * qty for denom, qty in counts.items())


def counts_to_json(counts: Mapping[int, int]) -> str:
    return json.dumps({str(denom): int(qty) for denom, qty in ordered(counts).items()})


def counts_from_json(text: str | None) -> dict[int, int]:
    """
    Decode a persisted count map.

    Raises MalformedStateError when the text is not a flat object of
    positive-integer keys to non-negative integer values.
    """
    if text is None or not str(text).strip():
        return {}
    try:
        raw = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise MalformedStateError("Stored denomination map is not valid JSON") from exc

    if not isinstance(raw, dict):
        raise MalformedStateError("Stored denomination map is not an object")

    counts: dict[int, int] = {}
    for key, value in raw.items():
        try:
            denom = int(key)
        except (TypeError, ValueError) as exc:
            raise MalformedStateError(f"Stored denomination key {key!r} is not a number") from exc
        if denom <= 0 or isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise MalformedStateError(
                f"Stored quantity for {key!r} is invalid",
                details={"denomination": key, "quantity": value},
            )
        counts[denom] = value
    return ordered(counts)


def parse_draft_quantity(text: Any) -> int:
    """Quantity typed in the counting draft; blanks, junk and negatives count as 0."""
    if text is None:
        return 0
    stripped = str(text).strip()
    digits = ""
    for ch in stripped:
        if ch not in "0123456789":
            break
        digits += ch
    return int(digits) if digits else 0
