"""Bundled-resource helpers.

Applications may ship a pre-populated database next to their migration
scripts. On first run, before any schema bootstrap, that file is copied
byte-for-byte to the database path so the bootstrap sees an existing
database instead of creating an empty one.

Failures are reported as :class:`~recordspine.core.errors.AssetCopyFailure`
through the logger and never abort initialization.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from recordspine.core.errors import AssetCopyFailure
from recordspine.core.logging import get_logger

logger = get_logger(__name__)

COPY_BUFFER_SIZE = 8192


def copy_attached_database(assets_dir: Path | None, database_path: Path | None) -> bool:
    """Copy ``assets_dir/<database file name>`` to ``database_path``.

    Nothing happens when there is no asset directory, the target already
    exists, or no asset with the database's name is bundled.

    Returns:
        ``True`` when a file was copied.
    """
    if assets_dir is None or database_path is None:
        return False
    if database_path.exists():
        return False

    source = assets_dir / database_path.name
    if not source.is_file():
        return False

    partial = database_path.with_name(database_path.name + ".part")
    try:
        database_path.parent.mkdir(parents=True, exist_ok=True)
        with source.open("rb") as src, partial.open("wb") as dst:
            shutil.copyfileobj(src, dst, COPY_BUFFER_SIZE)
        partial.replace(database_path)
    except OSError as e:
        err = AssetCopyFailure(f"Failed to copy bundled database: {e}", cause=e).with_context(
            path=str(database_path), source=str(source)
        )
        logger.error("assets.copy_failed", **err.to_dict())
        if partial.exists():
            partial.unlink()
        return False

    logger.info("assets.database_copied", source=str(source), target=str(database_path))
    return True


__all__ = ["copy_attached_database", "COPY_BUFFER_SIZE"]
