from __future__ import annotations

import json
from typing import Any

from flask import current_app

from ..extensions import db
from ..models import AppSetting

CASH_COUNTER_DRAFT_KEY = "cash_counter_draft"
SALE_CURRENT_TOTAL_KEY = "sale_current_total_cents"


class SettingsError(ValueError):
    pass


def get_setting(key: str, default: str | None = None, *, session=None) -> str | None:
    session = session or db.session
    row = session.get(AppSetting, key)
    if row is None:
        return default
    return row.value


def set_setting(key: str, value: str, *, session=None, commit: bool = True) -> AppSetting:
    """Insert or replace a setting value."""
    if not key:
        raise SettingsError("Setting key is required")
    if value is None:
        raise SettingsError(f"Setting {key!r} cannot be null")

    session = session or db.session
    row = session.get(AppSetting, key)
    if row is None:
        row = AppSetting(key=key, value=value)
        session.add(row)
    else:
        row.value = value

    if commit:
        session.commit()
    else:
        session.flush()
    return row


def delete_setting(key: str, *, session=None) -> bool:
    session = session or db.session
    row = session.get(AppSetting, key)
    if row is None:
        return False
    session.delete(row)
    session.commit()
    return True


def get_json_setting(key: str, default: Any = None, *, session=None) -> Any:
    """Decode a JSON setting; unreadable values fall back to `default`."""
    raw = get_setting(key, session=session)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except ValueError:
        current_app.logger.warning("Setting %s holds malformed JSON; using default", key)
        return default


def set_json_setting(key: str, value: Any, *, session=None, commit: bool = True) -> AppSetting:
    return set_setting(key, json.dumps(value), session=session, commit=commit)
