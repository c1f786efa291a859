# Overview: Transaction and retry primitives shared by the services.

from __future__ import annotations

import time
from contextlib import contextmanager

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


@contextmanager
def atomic(session=None):
    """
    Run a block as one transaction: commit on success, rollback on any error.

    The exception is re-raised after rollback so callers see the original
    failure with the database untouched.
    """
    session = session or db.session
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


def run_with_retry(func, *, session=None, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (e.g. "database is locked") and StaleDataError
    (optimistic locking conflicts). Domain errors propagate immediately.
    """
    session = session or db.session
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc
