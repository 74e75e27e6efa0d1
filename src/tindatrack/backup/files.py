"""Reading and writing backup documents on disk.

The engine only returns document text; these helpers are what the CLI
and the daily trigger use to export it.
"""

import os
from pathlib import Path

from tindatrack.backup.models import BackupResult


def write_backup_file(result: BackupResult, directory: str | Path) -> Path:
    """Write a successful backup's document into *directory*.

    The document is written to a ``.tmp`` sibling first and renamed into
    place, so a failed write never leaves a partial ``.json`` file.

    Args:
        result: Result of ``create_backup()``.
        directory: Target directory (created if missing).

    Returns:
        Path of the written file.

    Raises:
        ValueError: If *result* is not a successful backup.
        OSError: If the file cannot be written.
    """
    if not result.success or result.document is None or not result.file_name:
        raise ValueError("Only successful backups can be written to disk")

    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / result.file_name
    tmp = target.with_name(target.name + ".tmp")

    try:
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(result.document)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, target)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise

    return target


def read_backup_file(path: str | Path) -> str:
    """Read a backup document as UTF-8 text."""
    with open(path, "r", encoding="utf-8") as f:
        return f.read()
