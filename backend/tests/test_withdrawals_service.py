import pytest

from caja.models import Withdrawal
from caja.services import withdrawals_service
from caja.services.withdrawals_service import WithdrawalError


def test_create_withdrawal(db_session):
    w = withdrawals_service.create_withdrawal(125050, reason="  Supplier payment ", created_at_ms=5000)

    assert w.id is not None
    assert w.amount_cents == 125050
    assert w.reason == "Supplier payment"
    assert w.to_dict()["created_at"] == 5000


def test_blank_reason_is_null(db_session):
    assert withdrawals_service.create_withdrawal(100, reason="   ").reason is None


@pytest.mark.parametrize("amount", [0, -100, 12.5, "100", True, None])
def test_rejects_non_positive_or_non_integer_amounts(db_session, amount):
    with pytest.raises(WithdrawalError):
        withdrawals_service.create_withdrawal(amount)
    assert db_session.query(Withdrawal).count() == 0


def test_range_sum_and_listing(db_session):
    withdrawals_service.create_withdrawal(100, created_at_ms=1000)
    withdrawals_service.create_withdrawal(250, created_at_ms=2000)
    withdrawals_service.create_withdrawal(999, created_at_ms=9000)

    assert withdrawals_service.sum_withdrawals_by_range(1000, 2000) == 350
    assert withdrawals_service.sum_withdrawals_by_range(3000, 4000) == 0
    listed = withdrawals_service.list_withdrawals_by_range(0, 10_000)
    assert [w.amount_cents for w in listed] == [999, 250, 100]


def test_delete_withdrawal(db_session):
    w = withdrawals_service.create_withdrawal(500)
    withdrawal_id = w.id

    withdrawals_service.delete_withdrawal(withdrawal_id)
    assert db_session.get(Withdrawal, withdrawal_id) is None

    with pytest.raises(WithdrawalError):
        withdrawals_service.delete_withdrawal(withdrawal_id)
