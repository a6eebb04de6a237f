# Overview: Flask CLI command groups for bootstrap, roll-ups, and maintenance.

# backend/backoffice/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates tables and seeds the default departments.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Expense roll-up:
# - python -m flask expenses transfer-monthly [--year 2024 --month 3]
#   Roll a month into its yearly bucket. Without options: last calendar month.
#   Meant to be run by cron on the 1st of each month.
#
# Invoices:
# - python -m flask invoices refresh-status
#   Persist Pending/Overdue/Paid statuses that drifted with the clock.
#
# Counters:
# - python -m flask counters list
#   Show every sequence counter and the last value handed out.

import click
from flask.cli import with_appcontext

from .extensions import db
from .services import department_service, expense_service, invoice_service, sequence_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize the back-office database.

    Creates:
    - every table (no-op for tables that already exist)
    - the default department list (missing names only)
    """
    click.echo("START Initializing back-office...")

    db.create_all()
    click.echo("PASS Tables created")

    added = department_service.seed_default_departments()
    if added:
        click.echo(f"PASS Seeded {added} department(s)")
    else:
        click.echo("PASS Departments already seeded")

    click.echo("DONE Back-office initialized")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA, counters included!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to seed departments.")


@click.group('expenses')
def expenses_group():
    """Expense roll-up commands."""


@expenses_group.command('transfer-monthly')
@click.option('--year', type=int, default=None, help='Year of the month to roll up')
@click.option('--month', type=click.IntRange(1, 12), default=None, help='Month (1-12) to roll up')
@with_appcontext
def transfer_monthly(year, month):
    """Roll one month of expenses into its yearly bucket (default: last month)."""
    if (year is None) != (month is None):
        raise click.UsageError("--year and --month must be given together")

    result = expense_service.transfer_monthly_to_yearly(year, month)
    if result["yearly"] is None:
        click.echo(f"WARN  {result['message']}")
        return

    entry = next(e for e in result["yearly"]["expenses"] if e["month"] == result["year_month"])
    click.echo(f"PASS {result['message']} (amount: {entry['amount']:.2f})")


@click.group('invoices')
def invoices_group():
    """Invoice maintenance commands."""


@invoices_group.command('refresh-status')
@with_appcontext
def refresh_status():
    """Re-derive persisted invoice statuses from due amounts and the clock."""
    changed = invoice_service.refresh_invoice_statuses()
    click.echo(f"PASS {changed} invoice status(es) updated")


@click.group('counters')
def counters_group():
    """Sequence counter inspection."""


@counters_group.command('list')
@with_appcontext
def list_counters():
    """List all sequence counters."""
    counters = sequence_service.list_counters()
    if not counters:
        click.echo("No counters allocated yet.")
        return

    click.echo(f"{'Name':<24} {'Value':>10}  Updated")
    click.echo("-" * 60)
    for counter in counters:
        click.echo(f"{counter.name:<24} {counter.value:>10}  {counter.updated_at:%Y-%m-%d %H:%M:%S}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(expenses_group)
    app.cli.add_command(invoices_group)
    app.cli.add_command(counters_group)
