"""Startup migrations against a real SQLite file."""

import pytest
from sqlalchemy import inspect, text

from caja import create_app
from caja.config import TestingConfig
from caja.extensions import db
from caja.schema import upgrade_schema
from caja.services.cash_ledger import CashLedger


@pytest.fixture
def migrated_app(tmp_path):
    class FileConfig(TestingConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'caja.db'}"
        AUTO_MIGRATE = True

    app = create_app(FileConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


def test_startup_upgrades_to_head(migrated_app):
    with migrated_app.app_context():
        tables = set(inspect(db.engine).get_table_names())
        assert {"sales", "sale_items", "withdrawals", "app_settings",
                "cash_state", "cash_movements", "alembic_version"} <= tables

        version = db.session.execute(text("SELECT version_num FROM alembic_version")).scalar()
        assert version == "0003_cash_drawer"


def test_fresh_database_has_empty_drawer(migrated_app):
    with migrated_app.app_context():
        state = CashLedger(db.session).get_state()
        assert state.counts == {}
        assert state.total_cents == 0


def test_upgrade_is_idempotent(migrated_app):
    with migrated_app.app_context():
        CashLedger(db.session).apply_movement("IN", {500: 1})
        db.session.remove()

        upgrade_schema()

        assert db.session.execute(text("SELECT COUNT(*) FROM cash_state")).scalar() == 1
        assert CashLedger(db.session).get_state().counts == {500: 1}
