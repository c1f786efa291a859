from __future__ import annotations

from ..extensions import db


class Withdrawal(db.Model):
    """Cash taken out of the business (expenses, owner draws)."""
    __tablename__ = "withdrawals"
    __table_args__ = (
        db.Index("ix_withdrawals_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.BigInteger, nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.Text, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "created_at": self.created_at,
            "amount_cents": self.amount_cents,
            "reason": self.reason,
        }
