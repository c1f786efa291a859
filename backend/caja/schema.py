"""
Schema bootstrap.

The schema version counter is Alembic's alembic_version table; startup
upgrades it to head and makes sure the drawer row exists.
"""

from __future__ import annotations

import os

from flask import current_app
from flask_migrate import upgrade

from .extensions import db

MIGRATIONS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "migrations")


def upgrade_schema() -> None:
    """Apply pending revisions, then seed the cash drawer row. Needs an app context."""
    from .services.cash_ledger import ensure_cash_state

    current_app.logger.info("Upgrading database schema")
    upgrade(directory=MIGRATIONS_DIR)
    ensure_cash_state(db.session)
