"""
Root Typer application for the chrono-tags CLI.
"""

from __future__ import annotations

import asyncio
import signal
import threading

import typer
from typer import Typer

from chrono_tags.cli.utils import (
    console,
    fail,
    load_settings,
    open_engine,
    print_json,
    print_report,
    print_table,
)
from chrono_tags.core.errors import TagEngineError

app = Typer(
    name="chrono-tags",
    help="chrono-tags, scheduled tag reconciliation for user accounts.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

DatabaseOption = typer.Option(None, "--database", "-d", help="SQLite database path.")
CatalogOption = typer.Option(None, "--catalog", "-c", help="YAML tag catalog path.")
JsonOption = typer.Option(False, "--json", help="Emit JSON.")


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from chrono_tags import __version__

        typer.echo(f"chrono-tags {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """chrono-tags CLI. Run, schedule and administer tag reconciliation."""


# ── Commands ─────────────────────────────────────────────────────────────


@app.command("init-db")
def init_db(
    database: str | None = DatabaseOption,
    catalog: str | None = CatalogOption,
) -> None:
    """Create the engine's tables."""
    engine = open_engine(database, catalog)
    engine.close()
    console.print(f"[green]✓[/green] Schema ready at {engine.conn.path}")


@app.command()
def run(
    database: str | None = DatabaseOption,
    catalog: str | None = CatalogOption,
    json_out: bool = JsonOption,
) -> None:
    """Run one reconciliation pass over all active users."""
    engine = open_engine(database, catalog)
    try:
        report = asyncio.run(engine.run_once())
    except TagEngineError as exc:
        fail(exc)
    finally:
        engine.close()
    print_report(report, as_json=json_out)


@app.command()
def schedule(
    hour: int | None = typer.Option(None, "--hour", help="Hour of day (0-23); defaults to settings."),
    database: str | None = DatabaseOption,
    catalog: str | None = CatalogOption,
) -> None:
    """Start the daily trigger and block until interrupted."""
    engine = open_engine(database, catalog)
    try:
        trigger = engine.schedule_daily(hour)
    except TagEngineError as exc:
        engine.close()
        fail(exc)

    stopped = threading.Event()

    def _shutdown(signum, frame) -> None:
        engine.scheduler.cancel()
        stopped.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    console.print(
        f"[green]Scheduled[/green] daily run at {trigger.at_hour:02d}:00 "
        f"{trigger.timezone} ({trigger.backend.name} backend). Ctrl+C to stop."
    )
    try:
        while not stopped.wait(1.0):
            pass
    finally:
        trigger.stop()
        engine.close()
    console.print("[dim]Scheduler stopped.[/dim]")


@app.command()
def grant(
    user_id: str = typer.Argument(..., help="User ID"),
    tag_id: str = typer.Argument(..., help="Tag ID"),
    database: str | None = DatabaseOption,
    catalog: str | None = CatalogOption,
) -> None:
    """Grant a tag to a user (administrative)."""
    engine = open_engine(database, catalog)
    try:
        committed = asyncio.run(engine.grant(user_id, tag_id))
    except TagEngineError as exc:
        fail(exc)
    finally:
        engine.close()
    if committed:
        console.print(f"[green]✓[/green] Granted {tag_id} to {user_id}")
    else:
        console.print(f"[dim]{user_id} already holds {tag_id}; nothing changed.[/dim]")


@app.command()
def revoke(
    user_id: str = typer.Argument(..., help="User ID"),
    tag_id: str = typer.Argument(..., help="Tag ID"),
    database: str | None = DatabaseOption,
    catalog: str | None = CatalogOption,
) -> None:
    """Revoke a tag from a user (administrative)."""
    engine = open_engine(database, catalog)
    try:
        committed = asyncio.run(engine.revoke(user_id, tag_id))
    except TagEngineError as exc:
        fail(exc)
    finally:
        engine.close()
    if committed:
        console.print(f"[green]✓[/green] Revoked {tag_id} from {user_id}")
    else:
        console.print(f"[dim]{user_id} does not hold {tag_id}; nothing changed.[/dim]")


@app.command("catalog")
def show_catalog(
    database: str | None = DatabaseOption,
    catalog: str | None = CatalogOption,
    json_out: bool = JsonOption,
) -> None:
    """List tag definitions in catalog order."""
    from chrono_tags.engine.wiring import load_catalog

    settings = load_settings(database, catalog)
    try:
        rule_catalog = load_catalog(settings)
    except TagEngineError as exc:
        fail(exc)
    rows = [definition.to_dict() for definition in rule_catalog.list_definitions()]
    if json_out:
        print_json(rows)
    else:
        print_table(rows, title="Tag catalog")


@app.command()
def tags(
    user_id: str = typer.Argument(..., help="User ID"),
    database: str | None = DatabaseOption,
    catalog: str | None = CatalogOption,
    json_out: bool = JsonOption,
) -> None:
    """Show a user's current tag assignments."""
    engine = open_engine(database, catalog)
    try:
        assignments = asyncio.run(engine.store.list_assignment_rows(user_id))
    except TagEngineError as exc:
        fail(exc)
    finally:
        engine.close()

    rows = [
        {
            "tag_id": row.tag_id,
            "name": engine.catalog.get(row.tag_id).name if row.tag_id in engine.catalog else "?",
            "assigned_at": row.assigned_at.isoformat(),
        }
        for row in assignments
    ]
    if json_out:
        print_json(rows)
    else:
        print_table(rows, title=f"Tags for {user_id}")
