"""Environment-driven settings for recordspine.

``RecordSpineSettings`` holds every scalar knob of the engine: where the
database lives, which schema version the application expects, how migration
scripts are split into statements, and how large the identity cache is.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.
    A typo in ``RECORDSPINE_DATABASE_VERSION`` must fail at startup, not
    half-way through a migration.

    - **Pydantic validation:** Type-checked at startup
    - **Environment-driven:** ``RECORDSPINE_*`` variables and ``.env`` files
    - **Sensible defaults:** ``Application.db``, version 1, legacy parser,
      1024 cached records

Examples:
    >>> from recordspine.core.settings import RecordSpineSettings
    >>> settings = RecordSpineSettings(database_name="school.db", database_version=3)
    >>> settings.sql_parser
    <SqlParserMode.LEGACY: 'legacy'>

Tags:
    settings, configuration, pydantic, environment, recordspine

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from recordspine.core.logging import level_number

DEFAULT_DATABASE_NAME = "Application.db"
DEFAULT_CACHE_SIZE = 1024
MEMORY_DATABASE = ":memory:"


class SqlParserMode(str, Enum):
    """How migration scripts are split into statements."""

    LEGACY = "legacy"
    DELIMITED = "delimited"


class RecordSpineSettings(BaseSettings):
    """Scalar engine configuration.

    Fields
    ──────
    database_name     : File name of the database inside ``data_dir``
    database_version  : Target schema version (0 is treated as 1)
    sql_parser        : Migration script dialect, fixed for the process
    cache_size        : Identity cache capacity
    data_dir          : Directory holding database files
    assets_dir        : Bundled resources (pre-populated db, migrations)
    migrations_path   : Migration directory, relative to ``assets_dir``
    logging_enabled   : Initial state of the engine logging switch
    log_level         : Minimum level of engine events (VERBOSE is DEBUG)
    """

    model_config = SettingsConfigDict(
        env_prefix="RECORDSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    database_name: str = Field(default=DEFAULT_DATABASE_NAME)
    database_version: int = Field(default=1, ge=0)
    sql_parser: SqlParserMode = Field(default=SqlParserMode.LEGACY)

    # ── Identity cache ───────────────────────────────────────────
    cache_size: int = Field(default=DEFAULT_CACHE_SIZE, gt=0)

    # ── Storage ──────────────────────────────────────────────────
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".recordspine" / "databases",
        description="Directory holding database files",
    )
    assets_dir: Path | None = Field(
        default=None,
        description="Bundled resources: pre-populated database and migrations",
    )
    migrations_path: str = Field(default="migrations")

    # ── Observability ────────────────────────────────────────────
    logging_enabled: bool = False
    log_level: str = "INFO"

    @field_validator("database_version")
    @classmethod
    def _zero_means_one(cls, value: int) -> int:
        return value or 1

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level_number(value)
        return value.upper()

    @property
    def is_memory(self) -> bool:
        return self.database_name == MEMORY_DATABASE

    @property
    def database_path(self) -> Path | None:
        """Absolute path of the database file, ``None`` for in-memory."""
        if self.is_memory:
            return None
        return self.data_dir / self.database_name

    @property
    def migrations_dir(self) -> Path | None:
        if self.assets_dir is None:
            return None
        return self.assets_dir / self.migrations_path
