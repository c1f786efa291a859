"""
Cash reconciliation.

Compares independently derived totals for a time range:
- counted (draft) vs. sales
- stored drawer vs. expected cash (sales - withdrawals)

Display-only; nothing here writes.
"""

from __future__ import annotations

from dataclasses import dataclass

from . import sales_service, withdrawals_service
from .cash_ledger import CashLedger

STATUS_OVER = "OVER"
STATUS_SHORT = "SHORT"
STATUS_OK = "OK"


def reconciliation_status(diff_cents: int) -> str:
    if diff_cents > 0:
        return STATUS_OVER
    if diff_cents < 0:
        return STATUS_SHORT
    return STATUS_OK


@dataclass(frozen=True)
class Reconciliation:
    start_ms: int
    end_ms: int
    sales_total_cents: int
    withdrawals_total_cents: int
    counted_total_cents: int
    stored_total_cents: int
    sale_draft_total_cents: int

    @property
    def count_vs_sales_cents(self) -> int:
        return self.counted_total_cents - self.sales_total_cents

    @property
    def expected_cash_cents(self) -> int:
        return self.sales_total_cents - self.withdrawals_total_cents

    @property
    def stored_vs_expected_cents(self) -> int:
        return self.stored_total_cents - self.expected_cash_cents

    def to_dict(self) -> dict:
        return {
            "start_ms": self.start_ms,
            "end_ms": self.end_ms,
            "sales_total_cents": self.sales_total_cents,
            "withdrawals_total_cents": self.withdrawals_total_cents,
            "counted_total_cents": self.counted_total_cents,
            "stored_total_cents": self.stored_total_cents,
            "sale_draft_total_cents": self.sale_draft_total_cents,
            "expected_cash_cents": self.expected_cash_cents,
            "count_vs_sales_cents": self.count_vs_sales_cents,
            "count_vs_sales_status": reconciliation_status(self.count_vs_sales_cents),
            "stored_vs_expected_cents": self.stored_vs_expected_cents,
            "stored_vs_expected_status": reconciliation_status(self.stored_vs_expected_cents),
        }


def build_reconciliation(ledger: CashLedger, start_ms: int, end_ms: int) -> Reconciliation:
    return Reconciliation(
        start_ms=start_ms,
        end_ms=end_ms,
        sales_total_cents=sales_service.sum_sales_by_range(start_ms, end_ms),
        withdrawals_total_cents=withdrawals_service.sum_withdrawals_by_range(start_ms, end_ms),
        counted_total_cents=ledger.draft_total_cents(),
        stored_total_cents=ledger.get_state().total_cents,
        sale_draft_total_cents=sales_service.get_current_sale_draft_total(),
    )
