"""Schema migrations.

Applies ``<version>.sql`` scripts in ascending numeric order, tracking the
schema version in the storage engine's own version slot
(``PRAGMA user_version``).

Modules
-------
sql_parser  legacy (line based) and delimited (statement based) script parsing
runner      MigrationRunner, DirectoryMigrationSource

Tags:
    recordspine, migrations, schema, database, DDL
"""

from recordspine.migrations.runner import (
    DirectoryMigrationSource,
    EmptyMigrationSource,
    MigrationResult,
    MigrationRunner,
    parse_version,
)
from recordspine.migrations.sql_parser import parse_delimited, parse_legacy, parse_script

__all__ = [
    "DirectoryMigrationSource",
    "EmptyMigrationSource",
    "MigrationResult",
    "MigrationRunner",
    "parse_version",
    "parse_delimited",
    "parse_legacy",
    "parse_script",
]
