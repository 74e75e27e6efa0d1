"""Exceptions raised inside the backup engine.

The engine converts these to ``BackupResult`` / ``RestoreResult`` at its
boundary; callers of ``create_backup`` and ``restore_backup`` never see
them raised.
"""

from tindatrack.backup.models import BackupErrorKind, RestoreErrorKind


class BackupError(Exception):
    """Backup could not be created."""

    def __init__(self, kind: BackupErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind


class RestoreError(Exception):
    """Base class for restore failures."""

    kind: RestoreErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)


class MalformedDocumentError(RestoreError):
    kind = RestoreErrorKind.MALFORMED_DOCUMENT


class SchemaMismatchError(RestoreError):
    kind = RestoreErrorKind.SCHEMA_MISMATCH

    def __init__(self, expected: int, found: int) -> None:
        super().__init__(
            f"Schema version mismatch: store is at version {expected}, "
            f"backup was made at version {found}. "
            "Please use a backup from this version."
        )
        self.expected = expected
        self.found = found


class ChecksumMismatchError(RestoreError):
    kind = RestoreErrorKind.CHECKSUM_MISMATCH

    def __init__(self, message: str = "Invalid or corrupted backup file: checksum mismatch") -> None:
        super().__init__(message)


class StoreFailureError(RestoreError):
    kind = RestoreErrorKind.STORE_FAILURE

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Store failure during restore: {cause!r}")
        self.cause = cause
