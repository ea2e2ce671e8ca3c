"""Tests for the recordspine CLI."""

from __future__ import annotations

import json

from typer.testing import CliRunner

from recordspine import __version__
from recordspine.cli.app import app
from recordspine.cli.utils import split_database_path
from tests._support import write_migrations

runner = CliRunner()

PACKAGE = "tests._support.discoverable"


class TestRootApp:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"recordspine {__version__}" in result.output

    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "schema" in result.output
        assert "migrate" in result.output


class TestSchemaCommand:
    def test_prints_ddl(self):
        result = runner.invoke(app, ["schema", PACKAGE])
        assert result.exit_code == 0
        assert "CREATE TABLE IF NOT EXISTS Book" in result.output

    def test_json(self):
        result = runner.invoke(app, ["schema", PACKAGE, "--json"])
        assert result.exit_code == 0
        statements = json.loads(result.output)
        assert statements[0].startswith("CREATE TABLE IF NOT EXISTS Book (Id INTEGER PRIMARY KEY")
        assert any("Shelf" in s and "position TEXT" in s for s in statements)

    def test_empty_package(self):
        result = runner.invoke(app, ["schema", "tests._support.does_not_exist"])
        assert result.exit_code == 0
        assert "No record types found" in result.output


class TestMigrateCommand:
    def test_create_then_upgrade(self, tmp_path):
        database = tmp_path / "school.db"
        migrations = write_migrations(
            tmp_path / "migrations",
            {"2.sql": "INSERT INTO Book (title, pages) VALUES ('Seeded', 10);"},
        )

        created = runner.invoke(app, ["migrate", PACKAGE, "-d", str(database), "--json"])
        assert created.exit_code == 0
        assert json.loads(created.output)["action"] == "create"

        upgraded = runner.invoke(
            app,
            ["migrate", PACKAGE, "-d", str(database), "-v", "2", "-m", str(migrations), "--json"],
        )
        assert upgraded.exit_code == 0
        payload = json.loads(upgraded.output)
        assert payload["action"] == "upgrade"
        assert payload["from_version"] == 1
        assert payload["migrations"] == ["2.sql"]

    def test_table_output(self, tmp_path):
        result = runner.invoke(app, ["migrate", PACKAGE, "-d", str(tmp_path / "a.db")])
        assert result.exit_code == 0
        assert "create" in result.output

    def test_failing_migration_exits_1(self, tmp_path):
        migrations = write_migrations(tmp_path / "migrations", {"1.sql": "DROP TABLE Missing;"})
        result = runner.invoke(
            app, ["migrate", PACKAGE, "-d", str(tmp_path / "a.db"), "-m", str(migrations)]
        )
        assert result.exit_code == 1


class TestVersionCommand:
    def test_reports_stored_version(self, tmp_path):
        database = tmp_path / "school.db"
        runner.invoke(app, ["migrate", PACKAGE, "-d", str(database), "-v", "3"])

        result = runner.invoke(app, ["version", "-d", str(database)])

        assert result.exit_code == 0
        assert "schema version 3" in result.output

    def test_missing_database(self, tmp_path):
        result = runner.invoke(app, ["version", "-d", str(tmp_path / "missing.db")])
        assert result.exit_code == 1


class TestUtils:
    def test_split_database_path(self, tmp_path):
        directory, name = split_database_path(str(tmp_path / "school.db"))
        assert directory == tmp_path.resolve()
        assert name == "school.db"

    def test_memory(self):
        assert split_database_path(":memory:")[1] == ":memory:"
