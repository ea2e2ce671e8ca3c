"""
Root Typer application for the recordspine CLI.

Commands work against record types discovered in an importable package::

    recordspine schema myapp.records
    recordspine migrate myapp.records --database ./school.db --version 3 --migrations ./migrations
    recordspine version --database ./school.db
"""

from __future__ import annotations

from pathlib import Path

import typer
from typer import Typer

from recordspine import __version__
from recordspine.cli.utils import (
    console,
    fail,
    output_bootstrap,
    output_statements,
    split_database_path,
)
from recordspine.core.config import Configuration
from recordspine.core.errors import RecordSpineError
from recordspine.core.settings import RecordSpineSettings, SqlParserMode
from recordspine.core.sqlite_conn import SqliteDatabase

app = Typer(
    name="recordspine",
    help="recordspine: declarative records and versioned SQLite schemas.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"recordspine {__version__}")
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
    """recordspine CLI: inspect and migrate record schemas."""


# ── Commands ─────────────────────────────────────────────────────────────


@app.command()
def schema(
    package: str = typer.Argument(..., help="Package to scan for record types"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Print the DDL of every record type found in PACKAGE."""
    from recordspine.metadata.ddl import create_index_definitions, create_table_definition
    from recordspine.metadata.registry import MetadataRegistry

    try:
        registry = MetadataRegistry()
        registry.discover([package])
        statements: list[str] = []
        for descriptor in registry.descriptors():
            statements.append(create_table_definition(descriptor, registry))
            statements.extend(create_index_definitions(descriptor))
    except RecordSpineError as e:
        fail(e)
    output_statements(statements, as_json=json_out)


@app.command()
def migrate(
    package: str = typer.Argument(..., help="Package to scan for record types"),
    database: str = typer.Option(..., "--database", "-d", help="Database path"),
    target_version: int = typer.Option(1, "--version", "-v", help="Target schema version"),
    migrations: Path | None = typer.Option(None, "--migrations", "-m", help="Directory of <version>.sql scripts"),
    parser: SqlParserMode = typer.Option(SqlParserMode.LEGACY, "--parser", help="Migration script dialect"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Create or upgrade DATABASE to --version using record types from PACKAGE."""
    from recordspine.migrations.runner import DirectoryMigrationSource
    from recordspine.runtime import RecordSpine

    data_dir, name = split_database_path(database)
    config = Configuration(
        settings=RecordSpineSettings(
            database_name=name,
            data_dir=data_dir,
            database_version=target_version,
            sql_parser=parser,
        ),
        discovery_packages=[package],
        migration_source=DirectoryMigrationSource(migrations) if migrations else None,
    )

    spine = RecordSpine()
    try:
        spine.initialize(config)
    except RecordSpineError as e:
        fail(e)
    result = spine.bootstrap_result
    spine.dispose()
    if result is not None:
        output_bootstrap(result, as_json=json_out)


@app.command()
def version(
    database: str = typer.Option(..., "--database", "-d", help="Database path"),
) -> None:
    """Print the stored schema version of DATABASE."""
    path = Path(database).expanduser()
    if not path.is_file():
        fail(FileNotFoundError(f"No database at {path}"))

    db = SqliteDatabase(path)
    try:
        db.open()
        console.print(f"{path.name}: schema version [bold]{db.version}[/bold]")
    except RecordSpineError as e:
        fail(e)
    finally:
        db.close()
