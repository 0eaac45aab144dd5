"""
Custom Flask CLI commands.

These commands are registered with the app via ``register_commands()``
in the application factory. Run them with ``flask <command_name>``.

Usage::

    flask db-check      # Verify database connectivity and schema
    flask init-db       # Create missing tables without migrations
    flask cache-stats   # Show entity cache counters
    flask cache-clear   # Drop every cached entity and view
"""

import json

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from repair_shop.extensions import db, entity_cache

EXPECTED_TABLES = (
    "customer",
    "car",
    "service_center",
    "service_request",
    "car_service_center",
)


@click.command("db-check")
@with_appcontext
def db_check_command():
    """
    Verify database connectivity and confirm the expected tables exist.

    Tests the connection string from the app config, runs a simple
    query against the database, and lists the tables it finds with
    their row counts.  Useful for confirming DATABASE_URL is correct
    and ``flask db upgrade`` has been run.
    """
    click.echo("=" * 60)
    click.echo("  Repair Shop — Database Connectivity Check")
    click.echo("=" * 60)

    db_uri = db.engine.url.render_as_string(hide_password=True)
    click.echo(f"\n  Connection string: {db_uri}\n")

    # -- Step 1: Basic connectivity ----------------------------------------
    click.echo("[1/2] Testing connection...")
    try:
        row = db.session.execute(db.text("SELECT 1 AS connected")).fetchone()
    except SQLAlchemyError as exc:
        click.secho(f"      ✗ Connection failed: {exc}", fg="red")
        click.echo("\n  Troubleshooting tips:")
        click.echo("    - Is the database server running?")
        click.echo("    - Does DATABASE_URL match your server config?")
        raise SystemExit(1) from exc
    if not row or row[0] != 1:
        click.secho("      ✗ Unexpected result from test query.", fg="red")
        raise SystemExit(1)
    click.secho("      ✓ Connected successfully.", fg="green")

    # -- Step 2: Tables and row counts -------------------------------------
    click.echo("[2/2] Checking tables...\n")
    present = set(inspect(db.engine).get_table_names())
    missing = [name for name in EXPECTED_TABLES if name not in present]
    for name in EXPECTED_TABLES:
        if name in missing:
            click.secho(f"      ✗ {name:<20} missing", fg="red")
            continue
        count = db.session.execute(
            db.text(f"SELECT COUNT(*) FROM {name}")  # noqa: S608
        ).scalar_one()
        click.echo(f"      ✓ {name:<20} {count} row(s)")

    click.echo("\n" + "=" * 60)
    if missing:
        click.secho(
            "  Schema incomplete. Run 'flask db upgrade' or 'flask init-db'.",
            fg="yellow",
            bold=True,
        )
        raise SystemExit(1)
    click.secho("  All checks passed. Database is ready.", fg="green", bold=True)
    click.echo("=" * 60)


@click.command("init-db")
@with_appcontext
def init_db_command():
    """Create any missing tables directly from the models."""
    db.create_all()
    click.echo(f"Tables ready on {current_app.config['SQLALCHEMY_DATABASE_URI']}")


@click.command("cache-stats")
@with_appcontext
def cache_stats_command():
    """Print entity cache and relationship view counters as JSON."""
    click.echo(json.dumps(entity_cache.coordinator.stats(), indent=2))


@click.command("cache-clear")
@with_appcontext
def cache_clear_command():
    """Drop every cached entity and view; later reads reload from the store."""
    entity_cache.coordinator.reset()
    click.echo("Entity caches cleared.")


def register_commands(app):
    """Register all custom CLI commands with the Flask application."""
    app.cli.add_command(db_check_command)
    app.cli.add_command(init_db_command)
    app.cli.add_command(cache_stats_command)
    app.cli.add_command(cache_clear_command)
