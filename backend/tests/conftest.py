"""
Pytest fixtures for the cash drawer back end.

Provides an in-memory database, a fresh drawer per test, and a test client.
"""

import pytest

from caja import create_app
from caja.config import TestingConfig
from caja.extensions import db
from caja.services.cash_ledger import CashLedger, ensure_cash_state


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestingConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Empty database with an empty drawer for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        ensure_cash_state(db.session)

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def ledger(db_session):
    return CashLedger(db_session)


@pytest.fixture(scope='function')
def seed_drawer(ledger):
    """Put the drawer in a known state without recording movements."""
    def _seed(counts):
        ledger.set_state(counts)
        ledger.session.commit()
        return ledger.get_state()
    return _seed
