"""Backup and restore of the TindaTrack store.

Provides checksummed JSON snapshots of every domain table, atomic
all-or-nothing restore, offline validation, file export and the daily
automatic backup.

Usage:
    from tindatrack.backup import create_backup, restore_backup, validate_backup
    from tindatrack.backup import write_backup_file, read_backup_file
"""

from tindatrack.backup.checksum import compute_checksum
from tindatrack.backup.engine import (
    backup_file_name,
    create_backup,
    restore_backup,
    validate_backup,
)
from tindatrack.backup.errors import (
    BackupError,
    ChecksumMismatchError,
    MalformedDocumentError,
    RestoreError,
    SchemaMismatchError,
    StoreFailureError,
)
from tindatrack.backup.files import read_backup_file, write_backup_file
from tindatrack.backup.models import (
    BackupErrorKind,
    BackupResult,
    RestoreErrorKind,
    RestoreResult,
    Snapshot,
)
from tindatrack.backup.scheduler import (
    BackupUser,
    DailyBackupOutcome,
    run_daily_backup,
)

__all__ = [
    "compute_checksum",
    "backup_file_name",
    "create_backup",
    "restore_backup",
    "validate_backup",
    "BackupError",
    "RestoreError",
    "MalformedDocumentError",
    "SchemaMismatchError",
    "ChecksumMismatchError",
    "StoreFailureError",
    "read_backup_file",
    "write_backup_file",
    "BackupErrorKind",
    "BackupResult",
    "RestoreErrorKind",
    "RestoreResult",
    "Snapshot",
    "BackupUser",
    "DailyBackupOutcome",
    "run_daily_backup",
]
