"""
CLI utility helpers: output formatting and database paths.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from recordspine.bootstrap import BootstrapResult
from recordspine.core.errors import RecordSpineError

console = Console()
err_console = Console(stderr=True)


# ── Path helpers ─────────────────────────────────────────────────────────


def split_database_path(database: str) -> tuple[Path, str]:
    """``/data/school.db`` → (``/data``, ``school.db``); ``:memory:`` stays as is."""
    if database == ":memory:":
        return Path.cwd(), database
    path = Path(database).expanduser().resolve()
    return path.parent, path.name


# ── Output helpers ───────────────────────────────────────────────────────


def fail(err: BaseException) -> NoReturn:
    """Print ``err`` and exit with status 1."""
    if isinstance(err, RecordSpineError):
        err_console.print(f"[bold red]Error[/bold red] ({err.__class__.__name__}): {err.message}")
        cause = err.cause
        if cause is not None:
            err_console.print(f"  caused by: {cause}")
    else:
        err_console.print(f"[bold red]Error[/bold red]: {err}")
    raise typer.Exit(code=1)


def output_statements(statements: list[str], *, as_json: bool = False) -> None:
    if as_json:
        console.print_json(json.dumps(statements))
        return
    if not statements:
        console.print("[dim]No record types found.[/dim]")
        return
    console.print(Syntax(";\n".join(statements) + ";", "sql", word_wrap=True))


def output_bootstrap(result: BootstrapResult, *, as_json: bool = False) -> None:
    payload: dict[str, Any] = {
        "action": result.action.value,
        "from_version": result.from_version,
        "to_version": result.to_version,
        "migrations": result.migrations,
    }
    if as_json:
        console.print_json(json.dumps(payload))
        return

    table = Table(title="Schema Bootstrap", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for key, value in payload.items():
        if isinstance(value, list):
            value = ", ".join(value) or "-"
        table.add_row(key, str(value))
    console.print(table)
