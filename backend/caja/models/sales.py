from __future__ import annotations

from ..extensions import db


class Sale(db.Model):
    """
    Completed sale.

    created_at is epoch milliseconds so range sums line up with the day
    boundaries the register UI computes.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.BigInteger, nullable=False)
    total_cents = db.Column(db.Integer, nullable=False)

    items = db.relationship(
        "SaleItem",
        backref="sale",
        lazy=True,
        order_by="SaleItem.id",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Sale id={self.id} total_cents={self.total_cents}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "created_at": self.created_at,
            "total_cents": self.total_cents,
        }


class SaleItem(db.Model):
    """
    Sale line with name/price snapshots.

    Snapshots keep history stable when the catalog changes later.
    """
    __tablename__ = "sale_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, nullable=False)
    product_name_snapshot = db.Column(db.String(255), nullable=False)
    unit_price_snapshot_cents = db.Column(db.Integer, nullable=False)
    qty = db.Column(db.Integer, nullable=False)
    line_total_cents = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "product_id": self.product_id,
            "product_name_snapshot": self.product_name_snapshot,
            "unit_price_snapshot_cents": self.unit_price_snapshot_cents,
            "qty": self.qty,
            "line_total_cents": self.line_total_cents,
        }
