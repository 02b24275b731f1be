"""
CLI utility helpers: settings, engine construction and output formatting.
"""

from __future__ import annotations

import json
import sys
from typing import Any, NoReturn

try:
    import typer
    from rich.console import Console
    from rich.table import Table
except ImportError as e:  # pragma: no cover
    raise SystemExit("Missing CLI deps.  Install with:  pip install chrono-tags") from e

from chrono_tags.core.errors import ConfigError, TagEngineError
from chrono_tags.core.logging import configure_logging
from chrono_tags.core.settings import TagEngineSettings, get_settings
from chrono_tags.engine.report import RunReport
from chrono_tags.engine.wiring import TagEngine, build_engine

console = Console()
err_console = Console(stderr=True)


# ── Settings / engine ────────────────────────────────────────────────────


def load_settings(database: str | None = None, catalog: str | None = None) -> TagEngineSettings:
    """Settings from the environment with ``--database`` / ``--catalog`` applied."""
    overrides: dict[str, Any] = {}
    if database is not None:
        overrides["database_path"] = database
    if catalog is not None:
        overrides["catalog_path"] = catalog
    try:
        settings = get_settings(**overrides)
    except ConfigError as exc:
        fail(exc)
    configure_logging(level=settings.log_level, json_format=settings.json_logs, stream=sys.stderr)
    return settings


def open_engine(database: str | None = None, catalog: str | None = None) -> TagEngine:
    settings = load_settings(database, catalog)
    try:
        return build_engine(settings)
    except TagEngineError as exc:
        fail(exc)


def fail(error: Exception, code: int = 1) -> NoReturn:
    """Print ``error`` and exit with ``code``."""
    label = error.category.value if isinstance(error, TagEngineError) else type(error).__name__
    message = error.message if isinstance(error, TagEngineError) else str(error)
    err_console.print(f"[bold red]Error[/bold red] ({label}): {message}")
    raise typer.Exit(code=code)


# ── Output helpers ───────────────────────────────────────────────────────


def print_json(payload: Any) -> None:
    # Unwrapped so the output stays valid JSON at any terminal width
    typer.echo(json.dumps(payload, indent=2, default=str, ensure_ascii=False))


def print_table(rows: list[dict[str, Any]], *, title: str = "") -> None:
    if not rows:
        console.print("[dim]No items.[/dim]")
        return
    table = Table(title=title or None, show_lines=False)
    for key in rows[0]:
        table.add_column(key, overflow="fold")
    for row in rows:
        table.add_row(*(str(v) if v is not None else "" for v in row.values()))
    console.print(table)


def print_report(report: RunReport, *, as_json: bool = False) -> None:
    if as_json:
        print_json(report.to_dict())
        return

    table = Table(title=f"Run {report.run_id}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for key, value in report.summary().items():
        table.add_row(key, "" if value is None else str(value))
    console.print(table)

    if report.failed:
        print_table([failure.to_dict() for failure in report.failed], title="Failed users")


__all__ = [
    "console",
    "err_console",
    "fail",
    "load_settings",
    "open_engine",
    "print_json",
    "print_report",
    "print_table",
]
