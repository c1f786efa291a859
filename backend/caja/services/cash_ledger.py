"""
Cash drawer ledger.

Owns the drawer snapshot (one CashState row), the append-only CashMovement
log and the in-progress counting draft.

INVARIANTS:
- Every denomination count is >= 0 in every committed state.
- A movement's total_cents == sum(denomination * 100 * quantity) over its delta.
- State change and movement insert/delete commit together or not at all.
- Reversal is positional: deleting a deposit subtracts from whatever is in
  the drawer now, so it fails once that cash has been paid out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from flask import current_app

from ..denominations import (
    DENOMINATIONS,
    check_movement_total,
    counts_from_json,
    counts_to_json,
    normalize_delta,
    ordered,
    parse_draft_quantity,
    total_cents,
)
from ..errors import (
    CashError,
    EmptyMovementError,
    InsufficientDenominationError,
    InvalidMovementError,
    MalformedStateError,
    MovementNotFoundError,
    ReversalUnderflowError,
)
from ..models import CashMovement, CashState
from ..time_utils import to_utc_z, utcnow
from . import settings_service
from .concurrency import atomic, lock_for_update, run_with_retry

__all__ = [
    "MOVEMENT_IN",
    "MOVEMENT_OUT",
    "CashLedger",
    "CashSnapshot",
    "CashError",
    "EmptyMovementError",
    "InsufficientDenominationError",
    "InvalidMovementError",
    "MalformedStateError",
    "MovementNotFoundError",
    "ReversalUnderflowError",
    "ensure_cash_state",
]

MOVEMENT_IN = "IN"
MOVEMENT_OUT = "OUT"
MOVEMENT_TYPES = (MOVEMENT_IN, MOVEMENT_OUT)


@dataclass(frozen=True)
class CashSnapshot:
    """What the drawer holds right now."""
    counts: dict[int, int] = field(default_factory=dict)
    updated_at: datetime | None = None

    @property
    def total_cents(self) -> int:
        return total_cents(self.counts)

    def count(self, denomination: int) -> int:
        return self.counts.get(denomination, 0)

    def to_dict(self) -> dict:
        return {
            "denominations": {str(d): q for d, q in self.counts.items()},
            "total_cents": self.total_cents,
            "updated_at": to_utc_z(self.updated_at),
        }


def ensure_cash_state(session) -> CashState:
    """Create the drawer row with an empty count if it does not exist yet."""
    row = session.get(CashState, CashState.SINGLETON_ID)
    if row is None:
        row = CashState(id=CashState.SINGLETON_ID, denominations_json="{}", updated_at=utcnow())
        session.add(row)
        session.commit()
    return row


def _non_zero(counts: Mapping[int, int]) -> dict[int, int]:
    return ordered({d: q for d, q in counts.items() if q})


class CashLedger:
    """
    Drawer engine bound to one SQLAlchemy session.

    Mutations (apply_movement, delete_movement, commit_draft) are atomic and
    leave the drawer untouched when they raise.
    """

    def __init__(self, session, *, denominations=DENOMINATIONS):
        self.session = session
        self.denominations = tuple(denominations)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    def _state_row(self, *, lock: bool = False) -> CashState | None:
        query = self.session.query(CashState).filter_by(id=CashState.SINGLETON_ID)
        if lock:
            query = lock_for_update(query)
        return query.first()

    def _decode(self, row: CashState) -> dict[int, int]:
        try:
            return _non_zero(counts_from_json(row.denominations_json))
        except MalformedStateError:
            # Overwritten by the next successful write
            current_app.logger.warning("Cash state holds a malformed denomination map; treating drawer as empty")
            return {}

    def get_state(self) -> CashSnapshot:
        row = self._state_row()
        if row is None:
            return CashSnapshot(counts={}, updated_at=utcnow())
        return CashSnapshot(counts=self._decode(row), updated_at=row.updated_at)

    def set_state(self, counts: Mapping[int, int]) -> None:
        """
        Overwrite the drawer snapshot. Flushes but never commits; only called
        from inside the ledger's own transactions.
        """
        row = self._state_row()
        if row is None:
            row = CashState(id=CashState.SINGLETON_ID)
            self.session.add(row)
        row.denominations_json = counts_to_json(_non_zero(counts))
        row.updated_at = utcnow()
        self.session.flush()

    # -------------------------------------------------------------------------
    # Movements
    # -------------------------------------------------------------------------

    def _check_direction(self, direction: Any) -> str:
        value = str(direction or "").strip().upper()
        if value not in MOVEMENT_TYPES:
            raise InvalidMovementError(
                "Movement type must be IN or OUT",
                details={"type": direction},
            )
        return value

    def _apply_in_transaction(self, direction: str, delta: Mapping[int, int], note: str | None) -> CashMovement:
        row = self._state_row(lock=True)
        counts = dict(self._decode(row)) if row is not None else {}
        amount = 0

        for denom, qty in delta.items():
            if qty == 0:
                continue
            current = counts.get(denom, 0)
            if direction == MOVEMENT_IN:
                counts[denom] = current + qty
            else:
                if current < qty:
                    raise InsufficientDenominationError(
                        f"Not enough ${denom} in the drawer ({current} available, {qty} requested)",
                        details={"denomination": denom, "available": current, "requested": qty},
                    )
                counts[denom] = current - qty
            amount += denom * 100 * qty

        if amount == 0:
            raise EmptyMovementError("The current count is empty")

        self.set_state(counts)

        movement = CashMovement(
            type=direction,
            total_cents=amount,
            denominations_json=counts_to_json(delta),
            note=note,
            created_at=utcnow(),
        )
        self.session.add(movement)
        self.session.flush()
        return movement

    def apply_movement(self, direction: str, delta: Mapping[Any, Any], note: str | None = None) -> CashMovement:
        """
        Deposit (IN) or withdraw (OUT) bills/coins.

        Args:
            direction: "IN" or "OUT"
            delta: denomination -> positive quantity moved
            note: optional free text stored on the movement

        Raises:
            InvalidMovementError: unknown direction/denomination or bad quantity
            InsufficientDenominationError: OUT would make a count negative
            EmptyMovementError: nothing to move
        """
        direction = self._check_direction(direction)
        delta = normalize_delta(delta, self.denominations)
        note = (note or "").strip() or None

        def _op():
            with atomic(self.session):
                movement = self._apply_in_transaction(direction, delta, note)
            return movement

        movement = run_with_retry(_op, session=self.session)
        current_app.logger.info(
            "Applied cash movement %s %s (%s cents)",
            movement.id, movement.type, movement.total_cents,
        )
        return movement

    def delete_movement(self, movement_id: int) -> None:
        """
        Remove a movement and undo its effect on the drawer.

        Raises:
            MovementNotFoundError: no such movement
            ReversalUnderflowError: the drawer no longer holds what the deposit added
        """
        def _op():
            with atomic(self.session):
                movement = self.session.get(CashMovement, movement_id)
                if movement is None:
                    raise MovementNotFoundError(
                        f"Movement {movement_id} not found",
                        details={"movement_id": movement_id},
                    )

                row = self._state_row(lock=True)
                counts = dict(self._decode(row)) if row is not None else {}

                for denom, qty in movement.denominations.items():
                    current = counts.get(denom, 0)
                    if movement.type == MOVEMENT_IN:
                        if current < qty:
                            raise ReversalUnderflowError(
                                f"Cannot delete: the drawer holds {current} x ${denom}, "
                                f"less than the {qty} this movement deposited",
                                details={
                                    "movement_id": movement_id,
                                    "denomination": denom,
                                    "available": current,
                                    "required": qty,
                                },
                            )
                        counts[denom] = current - qty
                    else:
                        counts[denom] = current + qty

                self.set_state(counts)
                kind, amount = movement.type, movement.total_cents
                self.session.delete(movement)
            return kind, amount

        kind, amount = run_with_retry(_op, session=self.session)
        current_app.logger.info("Reversed cash movement %s %s (%s cents)", movement_id, kind, amount)

    def get_movement(self, movement_id: int) -> CashMovement | None:
        return self.session.get(CashMovement, movement_id)

    def list_movements(self, limit: int = 50) -> list[CashMovement]:
        """Newest first."""
        return (
            self.session.query(CashMovement)
            .order_by(CashMovement.created_at.desc(), CashMovement.id.desc())
            .limit(limit)
            .all()
        )

    # -------------------------------------------------------------------------
    # Counting draft
    # -------------------------------------------------------------------------

    def _blank_draft(self) -> dict[str, str]:
        return {str(d): "" for d in self.denominations}

    def _clean_draft(self, draft: Mapping[Any, Any]) -> dict[str, str]:
        if not isinstance(draft, Mapping):
            raise InvalidMovementError("Draft must be a mapping of denomination to text")
        clean: dict[str, str] = {}
        for key, value in draft.items():
            try:
                denom = int(str(key).strip())
            except ValueError:
                raise InvalidMovementError(f"Unknown denomination: {key!r}", details={"denomination": str(key)})
            if denom not in self.denominations:
                raise InvalidMovementError(f"Unknown denomination: {denom}", details={"denomination": denom})
            clean[str(denom)] = "" if value is None else str(value)
        return clean

    def get_draft(self) -> dict[str, str]:
        raw = settings_service.get_json_setting(
            settings_service.CASH_COUNTER_DRAFT_KEY, {}, session=self.session
        )
        if not isinstance(raw, dict):
            return {}
        return {str(k): "" if v is None else str(v) for k, v in raw.items()}

    def set_draft(self, draft: Mapping[Any, Any]) -> dict[str, str]:
        """Replace the whole draft (the caller debounces)."""
        clean = self._clean_draft(draft)
        settings_service.set_json_setting(
            settings_service.CASH_COUNTER_DRAFT_KEY, clean, session=self.session
        )
        return clean

    def clear_draft(self) -> dict[str, str]:
        return self.set_draft(self._blank_draft())

    def draft_counts(self) -> dict[int, int]:
        draft = self.get_draft()
        counts = {d: parse_draft_quantity(draft.get(str(d))) for d in self.denominations}
        return {d: q for d, q in counts.items() if q > 0}

    def draft_total_cents(self) -> int:
        return total_cents(self.draft_counts())

    def commit_draft(self, direction: str, note: str | None = None) -> CashMovement:
        """Apply the counted draft as one movement and blank the draft with it."""
        direction = self._check_direction(direction)
        delta = self.draft_counts()
        check_movement_total(delta)
        note = (note or "").strip() or None
        blank = self._blank_draft()

        def _op():
            with atomic(self.session):
                movement = self._apply_in_transaction(direction, delta, note)
                settings_service.set_json_setting(
                    settings_service.CASH_COUNTER_DRAFT_KEY, blank, session=self.session, commit=False
                )
            return movement

        movement = run_with_retry(_op, session=self.session)
        current_app.logger.info(
            "Committed counting draft as movement %s %s (%s cents)",
            movement.id, movement.type, movement.total_cents,
        )
        return movement
