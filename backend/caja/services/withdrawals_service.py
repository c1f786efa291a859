"""
Withdrawals Service

Cash taken out of the business for expenses or owner draws. Amounts only;
which bills left the drawer is tracked separately by the cash ledger.
"""

from __future__ import annotations


from sqlalchemy import func

from ..extensions import db
from ..models import Withdrawal
from ..time_utils import now_ms


class WithdrawalError(Exception):
    """Raised for withdrawal operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def create_withdrawal(amount_cents: int, reason: str | None = None, created_at_ms: int | None = None) -> Withdrawal:
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
        raise WithdrawalError("amount_cents must be an integer", details={"value": amount_cents})
    if amount_cents <= 0:
        raise WithdrawalError("Withdrawal amount must be positive", details={"value": amount_cents})

    withdrawal = Withdrawal(
        amount_cents=amount_cents,
        reason=(reason or "").strip() or None,
        created_at=created_at_ms if created_at_ms is not None else now_ms(),
    )
    db.session.add(withdrawal)
    db.session.commit()
    return withdrawal


def list_withdrawals_by_range(start_ms: int, end_ms: int) -> list[Withdrawal]:
    """Withdrawals with start_ms <= created_at <= end_ms, newest first."""
    return (
        db.session.query(Withdrawal)
        .filter(Withdrawal.created_at >= start_ms, Withdrawal.created_at <= end_ms)
        .order_by(Withdrawal.created_at.desc(), Withdrawal.id.desc())
        .all()
    )


def sum_withdrawals_by_range(start_ms: int, end_ms: int) -> int:
    total = (
        db.session.query(func.sum(Withdrawal.amount_cents))
        .filter(Withdrawal.created_at >= start_ms, Withdrawal.created_at <= end_ms)
        .scalar()
    )
    return int(total or 0)


def delete_withdrawal(withdrawal_id: int) -> None:
    withdrawal = db.session.get(Withdrawal, withdrawal_id)
    if not withdrawal:
        raise WithdrawalError("Withdrawal not found", details={"withdrawal_id": withdrawal_id})
    db.session.delete(withdrawal)
    db.session.commit()
