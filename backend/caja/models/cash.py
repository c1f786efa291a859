from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..denominations import counts_from_json
from ..errors import MalformedStateError
from ..time_utils import to_utc_z


class CashState(db.Model):
    """
    Current physical count of the cash drawer, one row only.

    Callers go through CashLedger.get_state(); nothing outside the ledger
    reads or writes this row directly.
    """
    __tablename__ = "cash_state"
    __table_args__ = (
        db.CheckConstraint("id = 1", name="ck_cash_state_singleton"),
    )

    SINGLETON_ID = 1

    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    denominations_json = db.Column(db.Text, nullable=False, default="{}")
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<CashState updated_at={self.updated_at}>"


class CashMovement(db.Model):
    """
    Append-only drawer ledger entry (deposit or withdrawal of bills/coins).

    IMMUTABLE: rows are never updated. Deleting one is only allowed through
    CashLedger.delete_movement(), which reverses its effect on CashState in
    the same transaction.

    denominations_json holds the delta that was applied, with positive
    quantities; the direction lives in `type`.
    """
    __tablename__ = "cash_movements"
    __table_args__ = (
        db.CheckConstraint("type IN ('IN', 'OUT')", name="ck_cash_movements_type"),
        db.Index("ix_cash_movements_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(8), nullable=False)
    total_cents = db.Column(db.Integer, nullable=False)
    denominations_json = db.Column(db.Text, nullable=False)
    note = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    @property
    def denominations(self) -> dict[int, int]:
        return counts_from_json(self.denominations_json)

    def readable_denominations(self) -> dict[int, int]:
        """Delta for display; an unreadable stored map shows as empty."""
        try:
            return self.denominations
        except MalformedStateError:
            current_app.logger.warning("Cash movement %s holds a malformed denomination map", self.id)
            return {}

    def __repr__(self) -> str:
        return f"<CashMovement id={self.id} type={self.type} total_cents={self.total_cents}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "total_cents": self.total_cents,
            "denominations": {str(d): q for d, q in self.readable_denominations().items()},
            "note": self.note,
            "created_at": to_utc_z(self.created_at),
        }
