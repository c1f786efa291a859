# Overview: Flask CLI command groups for bootstrap and cash drawer operations.

# backend/caja/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Apply pending migrations and make sure the cash drawer row exists.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Cash drawer:
# - python -m flask cash state
#   Show the current denomination counts and drawer total.
# - python -m flask cash movements --limit 20
#   List recent movements, newest first.
# - python -m flask cash apply IN 1000=2 500=1 --note "Opening float"
#   Deposit (IN) or withdraw (OUT) bills/coins.
# - python -m flask cash delete 7
#   Delete movement 7 and reverse its effect on the drawer.

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .money import format_cents
from .schema import upgrade_schema
from .services.cash_ledger import CashLedger, CashError, ensure_cash_state
from .time_utils import to_utc_z


def _symbol() -> str:
    return current_app.config.get("CURRENCY_SYMBOL", "$")


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Upgrade the schema to head and seed the cash drawer row (idempotent)."""
    click.echo("START Initializing database...")
    upgrade_schema()
    click.echo("PASS Schema up to date, cash drawer ready")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()
    click.echo("BUILD Creating all tables...")
    db.create_all()
    ensure_cash_state(db.session)
    click.echo("PASS Database reset complete")


# =============================================================================
# CASH DRAWER COMMANDS
# =============================================================================

@click.group('cash')
def cash_group():
    """Cash drawer inspection and movement commands."""


@cash_group.command('state')
@with_appcontext
def show_state():
    """Show denomination counts and drawer total."""
    ledger = CashLedger(db.session)
    state = ledger.get_state()
    symbol = _symbol()

    click.echo("\n" + "="*40)
    click.echo(f"{'Denomination':<15} {'Qty':>8} {'Subtotal':>15}")
    click.echo("="*40)
    for denom in ledger.denominations:
        qty = state.count(denom)
        click.echo(f"{symbol}{denom:<14} {qty:>8} {format_cents(denom * 100 * qty, symbol):>15}")
    click.echo("="*40)
    click.echo(f"{'Total':<24} {format_cents(state.total_cents, symbol):>15}")
    click.echo(f"Updated: {to_utc_z(state.updated_at)}\n")


@cash_group.command('movements')
@click.option('--limit', type=int, default=20, help='Max movements to show')
@with_appcontext
def list_movements(limit):
    """List recent movements, newest first."""
    movements = CashLedger(db.session).list_movements(limit=limit)
    if not movements:
        click.echo("No movements found.")
        return

    symbol = _symbol()
    for m in movements:
        denoms = ", ".join(f"{symbol}{d} x{q}" for d, q in m.readable_denominations().items())
        sign = "+" if m.type == "IN" else "-"
        click.echo(
            f"{m.id:<6} {to_utc_z(m.created_at)} {sign}{format_cents(m.total_cents, symbol):<14} "
            f"[{denoms}] {m.note or ''}"
        )


def _parse_pairs(pairs):
    delta = {}
    for pair in pairs:
        denom, sep, qty = pair.partition("=")
        if not sep:
            raise click.BadParameter(f"Expected DENOM=QTY, got {pair!r}")
        try:
            delta[denom.strip()] = int(qty)
        except ValueError:
            raise click.BadParameter(f"Quantity must be a whole number in {pair!r}")
    return delta


@cash_group.command('apply')
@click.argument('direction', type=click.Choice(['IN', 'OUT'], case_sensitive=False))
@click.argument('pairs', nargs=-1, required=True)
@click.option('--note', default=None, help='Optional note stored on the movement')
@with_appcontext
def apply_movement_cli(direction, pairs, note):
    """Deposit (IN) or withdraw (OUT) bills/coins given as DENOM=QTY pairs."""
    ledger = CashLedger(db.session)
    try:
        movement = ledger.apply_movement(direction, _parse_pairs(pairs), note)
    except CashError as e:
        click.echo(f"FAIL {e}")
        return

    click.echo(
        f"PASS Movement {movement.id} {movement.type} "
        f"{format_cents(movement.total_cents, _symbol())}; "
        f"drawer now {format_cents(ledger.get_state().total_cents, _symbol())}"
    )


@cash_group.command('delete')
@click.argument('movement_id', type=int)
@with_appcontext
def delete_movement_cli(movement_id):
    """Delete a movement and reverse its effect on the drawer."""
    ledger = CashLedger(db.session)
    try:
        ledger.delete_movement(movement_id)
    except CashError as e:
        click.echo(f"FAIL {e}")
        return

    click.echo(
        f"PASS Movement {movement_id} deleted; "
        f"drawer now {format_cents(ledger.get_state().total_cents, _symbol())}"
    )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(cash_group)
