# backend/caja/__init__.py
from flask import Flask

from .config import Config
from .extensions import db, migrate
from .schema import MIGRATIONS_DIR, upgrade_schema


def create_app(config_class=Config) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db, directory=MIGRATIONS_DIR, render_as_batch=True)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.cash import cash_bp
    from .routes.sales import sales_bp
    from .routes.withdrawals import withdrawals_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(cash_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(withdrawals_bp)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    if app.config.get("AUTO_MIGRATE"):
        with app.app_context():
            upgrade_schema()

    return app
