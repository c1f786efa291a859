"""
Sales Service

Records completed sales with their line snapshots and answers the range
sums the cash reconciliation needs. Product management lives elsewhere;
lines only carry a product id plus name/price snapshots.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from sqlalchemy import func, select

from ..extensions import db
from ..models import Sale, SaleItem
from ..time_utils import now_ms
from . import settings_service
from .concurrency import atomic


class SaleError(Exception):
    """Raised for sale operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def _as_int(data: Mapping[str, Any], key: str, *, minimum: int | None = None) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise SaleError(f"{key} must be an integer", details={"field": key, "value": value})
    if minimum is not None and value < minimum:
        raise SaleError(f"{key} must be >= {minimum}", details={"field": key, "value": value})
    return value


def create_sale(items: Iterable[Mapping[str, Any]], created_at_ms: int | None = None) -> Sale:
    """
    Create a sale and its lines in one transaction.

    Each item needs product_id, product_name_snapshot,
    unit_price_snapshot_cents and qty. Lines with qty 0 are skipped.
    """
    lines = []
    for raw in items or []:
        qty = _as_int(raw, "qty", minimum=0)
        if qty == 0:
            continue
        name = str(raw.get("product_name_snapshot") or "").strip()
        if not name:
            raise SaleError("product_name_snapshot required", details={"field": "product_name_snapshot"})
        lines.append({
            "product_id": _as_int(raw, "product_id"),
            "product_name_snapshot": name,
            "unit_price_snapshot_cents": _as_int(raw, "unit_price_snapshot_cents", minimum=0),
            "qty": qty,
        })

    if not lines:
        raise SaleError("A sale needs at least one item")

    total = sum(line["unit_price_snapshot_cents"] * line["qty"] for line in lines)

    with atomic(db.session):
        sale = Sale(
            created_at=created_at_ms if created_at_ms is not None else now_ms(),
            total_cents=total,
        )
        db.session.add(sale)
        db.session.flush()

        for line in lines:
            db.session.add(SaleItem(
                sale_id=sale.id,
                line_total_cents=line["unit_price_snapshot_cents"] * line["qty"],
                **line,
            ))

    return sale


def get_sale(sale_id: int) -> Sale | None:
    return db.session.get(Sale, sale_id)


def list_sales_by_range(start_ms: int, end_ms: int) -> list[Sale]:
    """Sales with start_ms <= created_at <= end_ms, newest first."""
    return (
        db.session.query(Sale)
        .filter(Sale.created_at >= start_ms, Sale.created_at <= end_ms)
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .all()
    )


def get_sale_items(sale_id: int) -> list[SaleItem]:
    return db.session.query(SaleItem).filter_by(sale_id=sale_id).order_by(SaleItem.id).all()


def sum_sales_by_range(start_ms: int, end_ms: int) -> int:
    total = (
        db.session.query(func.sum(Sale.total_cents))
        .filter(Sale.created_at >= start_ms, Sale.created_at <= end_ms)
        .scalar()
    )
    return int(total or 0)


def get_sale_items_summary(sale_ids: list[int]) -> dict[int, str]:
    """One "Name xQty, Other xQty" line per sale, for history lists."""
    if not sale_ids:
        return {}

    rows = (
        db.session.query(SaleItem.sale_id, SaleItem.product_name_snapshot, SaleItem.qty)
        .filter(SaleItem.sale_id.in_(sale_ids))
        .order_by(SaleItem.sale_id, SaleItem.id)
        .all()
    )

    parts: dict[int, list[str]] = {}
    for sale_id, name, qty in rows:
        parts.setdefault(sale_id, []).append(f"{name} x{qty}")

    return {sale_id: ", ".join(parts.get(sale_id, [])) for sale_id in sale_ids}


def _update_item(item: SaleItem, qty: int | None, unit_price_cents: int | None) -> None:
    if qty is not None:
        item.qty = qty
    if unit_price_cents is not None:
        item.unit_price_snapshot_cents = unit_price_cents
    item.line_total_cents = item.qty * item.unit_price_snapshot_cents


def apply_sale_edits(sale_id: int, edits: Iterable[Mapping[str, Any]]) -> Sale | None:
    """
    Apply line edits to a sale atomically.

    Edit shapes:
    - {"type": "update", "item_id": 3, "qty": 2, "unit_price_snapshot_cents": 500}
    - {"type": "delete", "item_id": 4}

    The sale total is recomputed from its lines. A sale left without lines
    is deleted and None is returned.
    """
    with atomic(db.session):
        sale = db.session.get(Sale, sale_id)
        if not sale:
            raise SaleError("Sale not found", details={"sale_id": sale_id})

        for edit in edits or []:
            kind = edit.get("type")
            item_id = edit.get("item_id")
            item = db.session.get(SaleItem, item_id) if item_id is not None else None
            if item is None or item.sale_id != sale_id:
                raise SaleError("Sale item not found", details={"item_id": item_id})

            if kind == "update":
                qty = _as_int(edit, "qty", minimum=1) if "qty" in edit else None
                price = (
                    _as_int(edit, "unit_price_snapshot_cents", minimum=0)
                    if "unit_price_snapshot_cents" in edit else None
                )
                _update_item(item, qty, price)
            elif kind == "delete":
                db.session.delete(item)
            else:
                raise SaleError("Edit type must be 'update' or 'delete'", details={"type": kind})

        db.session.flush()

        new_total = (
            db.session.query(func.sum(SaleItem.line_total_cents))
            .filter(SaleItem.sale_id == sale_id)
            .scalar()
        )
        remaining = db.session.query(SaleItem).filter_by(sale_id=sale_id).count()

        if remaining == 0:
            db.session.delete(sale)
            result = None
        else:
            sale.total_cents = int(new_total or 0)
            result = sale

    return result


def delete_sale(sale_id: int) -> None:
    with atomic(db.session):
        sale = db.session.get(Sale, sale_id)
        if not sale:
            raise SaleError("Sale not found", details={"sale_id": sale_id})
        db.session.delete(sale)


def get_products_sold_summary(start_ms: int, end_ms: int) -> list[dict]:
    """Units sold per product name in the range, best sellers first."""
    in_range = select(Sale.id).where(Sale.created_at >= start_ms, Sale.created_at <= end_ms)
    total_qty = func.sum(SaleItem.qty).label("total_qty")
    rows = (
        db.session.query(SaleItem.product_name_snapshot, total_qty)
        .filter(SaleItem.sale_id.in_(in_range))
        .group_by(SaleItem.product_name_snapshot)
        .order_by(total_qty.desc(), SaleItem.product_name_snapshot)
        .all()
    )
    return [{"product_name": name, "total_qty": int(qty or 0)} for name, qty in rows]


# =============================================================================
# SALE IN PROGRESS
# =============================================================================

def get_current_sale_draft_total() -> int:
    """Running total of the sale being rung up; 0 when unset or unreadable."""
    raw = settings_service.get_setting(settings_service.SALE_CURRENT_TOTAL_KEY)
    if raw is None:
        return 0
    try:
        return int(raw.strip())
    except ValueError:
        return 0


def set_current_sale_draft_total(total_cents: int) -> None:
    if isinstance(total_cents, bool) or not isinstance(total_cents, int):
        raise SaleError("total_cents must be an integer", details={"value": total_cents})
    settings_service.set_setting(settings_service.SALE_CURRENT_TOTAL_KEY, str(total_cents))
