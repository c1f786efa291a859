# backend/caja/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored next to the process working directory
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///tienda_caja.db", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Apply pending Alembic revisions when the app starts
    AUTO_MIGRATE = _env_flag("AUTO_MIGRATE", True)

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    CURRENCY_SYMBOL = os.environ.get("CURRENCY_SYMBOL", "$")
    CASH_MOVEMENTS_DEFAULT_LIMIT = int(os.environ.get("CASH_MOVEMENTS_DEFAULT_LIMIT", "50"))


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    AUTO_MIGRATE = False
    LOG_LEVEL = "DEBUG"
