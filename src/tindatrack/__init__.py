"""TindaTrack store backup and restore.

Usage:
    from tindatrack import AsyncSQLiteStore, AuditLog, create_backup, restore_backup

    store = AsyncSQLiteStore("tindatrack.db")
    audit = AuditLog(store)
    result = await create_backup(store, audit, actor_id=1, actor_name="alice",
                                 label="Monthly Backup")
"""

__version__ = "0.1.0"

from tindatrack.adapters import AsyncSQLiteStore, DomainStore, InMemoryStore, StoreTransaction
from tindatrack.audit import AuditAction, AuditLog, AuditRecord
from tindatrack.backup import (
    BackupErrorKind,
    BackupResult,
    RestoreErrorKind,
    RestoreResult,
    Snapshot,
    create_backup,
    read_backup_file,
    restore_backup,
    run_daily_backup,
    validate_backup,
    write_backup_file,
)
from tindatrack.config import AppConfig, StoreProfile, load_config
from tindatrack.factory import ProfileNotFoundError, open_store, resolve_profile
from tindatrack.schema import DOMAIN_TABLES, SCHEMA_VERSION

__all__ = [
    "__version__",
    "AsyncSQLiteStore",
    "DomainStore",
    "InMemoryStore",
    "StoreTransaction",
    "AuditAction",
    "AuditLog",
    "AuditRecord",
    "BackupErrorKind",
    "BackupResult",
    "RestoreErrorKind",
    "RestoreResult",
    "Snapshot",
    "create_backup",
    "read_backup_file",
    "restore_backup",
    "run_daily_backup",
    "validate_backup",
    "write_backup_file",
    "AppConfig",
    "StoreProfile",
    "load_config",
    "ProfileNotFoundError",
    "open_store",
    "resolve_profile",
]
