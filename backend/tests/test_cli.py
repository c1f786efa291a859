import pytest

from caja.models import CashMovement, CashState


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


def test_cash_apply_and_state(runner, ledger, db_session):
    result = runner.invoke(args=["cash", "apply", "IN", "1000=2", "500=1", "--note", "Opening float"])

    assert result.exit_code == 0
    assert "PASS Movement" in result.output
    assert "$2,500.00" in result.output

    db_session.expire_all()
    assert ledger.get_state().counts == {1000: 2, 500: 1}

    result = runner.invoke(args=["cash", "state"])
    assert result.exit_code == 0
    assert "$2,500.00" in result.output


def test_cash_apply_lowercase_direction(runner, ledger, db_session):
    result = runner.invoke(args=["cash", "apply", "in", "5=3"])

    assert result.exit_code == 0
    db_session.expire_all()
    assert ledger.get_state().counts == {5: 3}


def test_cash_apply_insufficient_reports_fail(runner, db_session):
    result = runner.invoke(args=["cash", "apply", "OUT", "100=1"])

    assert "FAIL" in result.output
    assert db_session.query(CashMovement).count() == 0


def test_cash_apply_rejects_malformed_pairs(runner, db_session):
    result = runner.invoke(args=["cash", "apply", "IN", "1000"])
    assert result.exit_code != 0

    result = runner.invoke(args=["cash", "apply", "IN", "1000=two"])
    assert result.exit_code != 0


def test_cash_movements_and_delete(runner, ledger, db_session):
    assert "No movements found." in runner.invoke(args=["cash", "movements"]).output

    movement_id = ledger.apply_movement("IN", {20: 5}).id

    listed = runner.invoke(args=["cash", "movements", "--limit", "5"])
    assert str(movement_id) in listed.output

    result = runner.invoke(args=["cash", "delete", str(movement_id)])
    assert "PASS" in result.output

    db_session.expire_all()
    assert ledger.get_state().counts == {}
    assert "FAIL" in runner.invoke(args=["cash", "delete", str(movement_id)]).output


def test_reset_db_leaves_empty_drawer(runner, ledger, db_session):
    ledger.apply_movement("IN", {100: 1})
    db_session.commit()

    result = runner.invoke(args=["system", "reset-db", "--yes"])

    assert result.exit_code == 0
    db_session.expire_all()
    assert db_session.query(CashMovement).count() == 0
    assert db_session.query(CashState).count() == 1
    assert ledger.get_state().counts == {}


def test_cash_apply_oversized_quantity_reports_fail(runner, db_session):
    result = runner.invoke(args=["cash", "apply", "IN", "1000=100000000000000000"])

    assert result.exit_code == 0
    assert "FAIL" in result.output
    assert db_session.query(CashMovement).count() == 0


def test_cash_movements_lists_unreadable_row(runner, ledger, db_session):
    movement_id = ledger.apply_movement("IN", {20: 1}).id
    db_session.get(CashMovement, movement_id).denominations_json = "{bad"
    db_session.commit()

    result = runner.invoke(args=["cash", "movements"])

    assert result.exit_code == 0
    assert str(movement_id) in result.output
