"""Backup and restore of the whole TindaTrack store.

A backup reads every domain table into one versioned, checksummed JSON
document and hands it back to the caller; the engine keeps no copy.  A
restore validates such a document and replaces every domain table with its
content inside a single store transaction.  Both operations write exactly
one audit record per call and report failures as result models instead of
raising.

Usage:
    from tindatrack.audit import AuditLog
    from tindatrack.backup.engine import create_backup, restore_backup, validate_backup

    audit = AuditLog(store)
    result = await create_backup(store, audit, actor_id=1, actor_name="alice",
                                 label="Monthly Backup")
    if result.success:
        Path(result.file_name).write_text(result.document)

    outcome = await restore_backup(store, audit, result.document,
                                   actor_id=1, actor_name="alice")

    # Offline check (sync -- no store access)
    report = validate_backup(result.document, schema_version=1)
"""

import json
import logging
import math
import re
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from tindatrack.adapters.base import DomainStore
from tindatrack.audit import AuditAction, AuditLog, AuditRecord
from tindatrack.backup.checksum import compute_checksum
from tindatrack.backup.errors import (
    BackupError,
    ChecksumMismatchError,
    MalformedDocumentError,
    RestoreError,
    SchemaMismatchError,
    StoreFailureError,
)
from tindatrack.backup.models import (
    BackupErrorKind,
    BackupResult,
    RestoreResult,
    Snapshot,
)
from tindatrack.schema.tables import AUDIT_TABLE, DOMAIN_TABLES

logger = logging.getLogger(__name__)

DEFAULT_APP_NAME = "TindaTrack"
DEFAULT_ACTOR_NAME = "System"


def safe_app_name(app_name: str) -> str:
    """*app_name* as it appears in backup file names."""
    return re.sub(r"[^A-Za-z0-9_-]", "", app_name) or DEFAULT_APP_NAME


def backup_file_name(label: str, app_name: str, now: datetime) -> str:
    """Build ``<AppName>_Backup_<label>_<epochMillis>.json``.

    Whitespace runs in *label* become ``_``; anything else outside
    ``[A-Za-z0-9_-]`` is dropped.

    Example:
        >>> backup_file_name(" Monthly  Backup/1 ", "TindaTrack",
        ...                  datetime(2026, 1, 1, tzinfo=timezone.utc))
        'TindaTrack_Backup_Monthly_Backup1_1767225600000.json'
    """
    safe_label = re.sub(r"\s+", "_", label.strip())
    safe_label = re.sub(r"[^A-Za-z0-9_-]", "", safe_label) or "Backup"
    return f"{safe_app_name(app_name)}_Backup_{safe_label}_{int(now.timestamp() * 1000)}.json"


async def _append_audit(audit: AuditLog, record: AuditRecord) -> None:
    """Write *record*; a failing audit write is logged, not raised."""
    try:
        await audit.append(record)
    except Exception:
        logger.exception("Could not write %s audit record", record.action.value)


# ---------------------------------------------------------------------------
# Backup
# ---------------------------------------------------------------------------


async def _read_tables(store: DomainStore) -> tuple[dict[str, list[dict]], list[str]]:
    """Read every domain table; unreadable tables come back empty."""
    tables: dict[str, list[dict]] = {}
    skipped: list[str] = []

    for table in DOMAIN_TABLES:
        try:
            tables[table] = await store.read_all(table)
        except Exception as e:
            logger.warning("Table %s not readable, backing it up as empty: %s", table, e)
            tables[table] = []
            skipped.append(table)

    if len(skipped) == len(DOMAIN_TABLES):
        raise BackupError(
            BackupErrorKind.NO_TABLES_READ,
            "No table could be read from the store",
        )
    return tables, skipped


async def _build_snapshot(
    store: DomainStore,
    actor_id: int | str,
    actor_name: str,
    now: datetime,
) -> tuple[Snapshot, list[str]]:
    tables, skipped = await _read_tables(store)

    try:
        version = await store.schema_version()
    except Exception as e:
        raise BackupError(
            BackupErrorKind.STORE_FAILURE,
            f"Could not read schema version: {e!r}",
        ) from e

    try:
        draft = Snapshot(
            schema_version=version,
            created_at=now.isoformat(),
            created_by=actor_id,
            created_by_name=actor_name,
            tables=tables,
            checksum="",
        )
        checksum = compute_checksum(draft.content())
    except (ValidationError, ValueError) as e:
        raise BackupError(
            BackupErrorKind.STORE_FAILURE,
            f"Store returned rows that cannot be exported: {e}",
        ) from e

    return draft.model_copy(update={"checksum": checksum}), skipped


async def create_backup(
    store: DomainStore,
    audit: AuditLog,
    actor_id: int | str | None,
    actor_name: str | None = DEFAULT_ACTOR_NAME,
    label: str = "Manual Backup",
    *,
    app_name: str = DEFAULT_APP_NAME,
    now: datetime | None = None,
) -> BackupResult:
    """Snapshot every domain table into a checksummed JSON document.

    Reads tables in ``DOMAIN_TABLES`` order.  A table that cannot be read is
    recorded as empty and listed in ``skipped_tables``; the backup only
    fails when the label is blank, no table at all could be read, or the
    schema version is unavailable.  No domain table is modified.

    Args:
        store: Store implementing ``DomainStore``.
        audit: Audit log receiving one ``BACKUP_CREATED`` or
            ``BACKUP_FAILED`` record.
        actor_id: Id of the user triggering the backup.  ``None`` is
            recorded as ``"system"``.
        actor_name: Display name; blank or ``None`` becomes ``"System"``.
        label: Free-text backup name, must be non-blank.
        app_name: Prefix for the generated document name.
        now: Creation time (defaults to the current UTC time).

    Returns:
        ``BackupResult`` carrying the serialized document, its generated
        file name, byte size and checksum on success.

    Example:
        result = await create_backup(store, audit, 1, "alice", "Test")
        result.file_name   # 'TindaTrack_Backup_Test_1767225600000.json'
    """
    actor_id = "system" if actor_id is None else actor_id
    actor_name = actor_name or DEFAULT_ACTOR_NAME
    now = now or datetime.now(timezone.utc)

    try:
        if not label or not label.strip():
            raise BackupError(BackupErrorKind.EMPTY_LABEL, "Please enter a backup name")

        snapshot, skipped = await _build_snapshot(store, actor_id, actor_name, now)
    except BackupError as e:
        logger.error("Backup '%s' failed: %s", label, e)
        await _append_audit(
            audit,
            AuditRecord(
                actor_id=actor_id,
                actor_name=actor_name,
                action=AuditAction.BACKUP_FAILED,
                timestamp=datetime.now(timezone.utc).isoformat(),
                label=label,
                details={"error_kind": e.kind.value, "reason": str(e)},
            ),
        )
        return BackupResult(success=False, error_kind=e.kind, error=str(e))

    document = snapshot.to_document()
    file_name = backup_file_name(label, app_name, now)
    size_bytes = len(document.encode("utf-8"))
    table_counts = {name: len(rows) for name, rows in snapshot.tables.items()}

    await _append_audit(
        audit,
        AuditRecord(
            actor_id=actor_id,
            actor_name=actor_name,
            action=AuditAction.BACKUP_CREATED,
            timestamp=now.isoformat(),
            label=label,
            file_name=file_name,
            file_size=size_bytes,
            checksum=snapshot.checksum,
            schema_version=snapshot.schema_version,
            details={"table_counts": table_counts, "skipped_tables": skipped},
        ),
    )
    logger.info(
        "Backup %s created: %d rows, %d bytes",
        file_name,
        sum(table_counts.values()),
        size_bytes,
    )

    return BackupResult(
        success=True,
        document=document,
        file_name=file_name,
        size_bytes=size_bytes,
        checksum=snapshot.checksum,
        table_counts=table_counts,
        skipped_tables=skipped,
    )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _reject_constant(name: str) -> float:
    raise MalformedDocumentError(f"Invalid JSON: {name} is not a number")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise MalformedDocumentError(f"Invalid JSON: number {text} is out of range")
    return value


def _parse_document(document: str | bytes) -> tuple[Snapshot, dict[str, Any]]:
    """Parse *document* into a ``Snapshot`` and the raw JSON object."""
    if isinstance(document, bytes):
        try:
            document = document.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedDocumentError(f"Backup file is not UTF-8 text: {e}") from e

    try:
        raw = json.loads(
            document, parse_constant=_reject_constant, parse_float=_finite_float
        )
    except json.JSONDecodeError as e:
        raise MalformedDocumentError(f"Invalid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise MalformedDocumentError("Backup file must contain a JSON object")
    if "checksum" not in raw:
        raise MalformedDocumentError("Backup file has no checksum")

    try:
        snapshot = Snapshot.model_validate(raw)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise MalformedDocumentError(f"Not a valid backup file: {problems}") from e

    return snapshot, raw


def _check_version(snapshot: Snapshot, expected: int) -> None:
    if snapshot.schema_version != expected:
        raise SchemaMismatchError(expected=expected, found=snapshot.schema_version)


def _verify_checksum(raw: dict[str, Any], stored: str) -> None:
    try:
        actual = compute_checksum(raw)
    except ValueError as e:
        raise MalformedDocumentError(f"Backup content is not valid JSON data: {e}") from e
    if actual != stored:
        raise ChecksumMismatchError()


def validate_backup(document: str | bytes, schema_version: int) -> dict:
    """Check a backup document without touching any store.

    Runs the same checks as ``restore_backup`` (shape, schema version,
    checksum) and reports tables the document omits as warnings.

    This function is **sync** -- it only inspects the given text.

    Args:
        document: Serialized snapshot.
        schema_version: Version the target store is at.

    Returns:
        Dict with ``valid`` (bool), ``errors`` (list[str]),
        ``warnings`` (list[str]) and ``error_kind`` (str or None).

    Example:
        report = validate_backup(Path("backup.json").read_text(), SCHEMA_VERSION)
        if not report["valid"]:
            print(report["errors"])
    """
    errors: list[str] = []
    warnings: list[str] = []

    try:
        snapshot, raw = _parse_document(document)
        _check_version(snapshot, schema_version)
        _verify_checksum(raw, snapshot.checksum)
    except RestoreError as e:
        errors.append(str(e))
        return {"valid": False, "errors": errors, "warnings": warnings, "error_kind": e.kind.value}

    missing = [t for t in DOMAIN_TABLES if t not in snapshot.tables]
    if missing:
        warnings.append(f"Tables not in backup (restored empty): {', '.join(missing)}")
    if AUDIT_TABLE in snapshot.tables:
        warnings.append(f"'{AUDIT_TABLE}' table in backup is ignored on restore")

    return {"valid": True, "errors": errors, "warnings": warnings, "error_kind": None}


# ---------------------------------------------------------------------------
# Restore
# ---------------------------------------------------------------------------


async def _replace_tables(store: DomainStore, snapshot: Snapshot) -> dict[str, int]:
    """Clear and refill every domain table in one transaction.

    Children are cleared before parents and parents inserted before
    children, so enforced foreign keys hold at every step.
    """
    try:
        tx = await store.begin_transaction()
    except Exception as e:
        raise StoreFailureError(e) from e

    counts: dict[str, int] = {}
    try:
        for table in reversed(DOMAIN_TABLES):
            await tx.clear(table)
        for table in DOMAIN_TABLES:
            rows = [dict(r) for r in snapshot.tables.get(table, [])]
            await tx.bulk_insert(table, rows)
            counts[table] = len(rows)
        await tx.commit()
    except BaseException as e:
        try:
            await tx.rollback()
        except Exception:
            logger.exception("Rollback after failed restore raised")
        raise StoreFailureError(e) from e

    return counts


async def restore_backup(
    store: DomainStore,
    audit: AuditLog,
    document: str | bytes,
    actor_id: int | str | None,
    actor_name: str | None = DEFAULT_ACTOR_NAME,
    *,
    source_name: str | None = None,
) -> RestoreResult:
    """Replace every domain table with the content of a backup document.

    Validation runs in order and stops at the first failure:

    1. the document parses as a snapshot (``MALFORMED_DOCUMENT``),
    2. its schema version equals the store's (``SCHEMA_MISMATCH``),
    3. its checksum matches its content (``CHECKSUM_MISMATCH``).

    The replacement then runs in one store transaction; any failure rolls
    it back and leaves the store exactly as it was (``STORE_FAILURE``).
    Tables the document omits end up empty.  The audit table is never
    touched except for the one ``RESTORE_COMPLETED`` or ``RESTORE_FAILED``
    record written per call.

    Cancellation during the transaction rolls back, is audited as a
    store failure, and is then re-raised.

    Args:
        store: Store implementing ``DomainStore``.
        audit: Audit log.
        document: Serialized snapshot text (``str`` or UTF-8 ``bytes``).
        actor_id: Id of the user restoring.
        actor_name: Display name; blank or ``None`` becomes ``"System"``.
        source_name: Optional file name the document came from, recorded
            in the audit label.

    Returns:
        ``RestoreResult`` with per-table row counts on success.

    Example:
        outcome = await restore_backup(store, audit, text, 1, "alice")
        if not outcome.success:
            print(outcome.error_kind, outcome.error)
    """
    actor_id = "system" if actor_id is None else actor_id
    actor_name = actor_name or DEFAULT_ACTOR_NAME
    label = f"Restore Operation - {source_name}" if source_name else "Restore Operation"
    size = len(document.encode("utf-8")) if isinstance(document, str) else len(document)
    expected: int | None = None
    snapshot: Snapshot | None = None

    try:
        snapshot, raw = _parse_document(document)
        try:
            expected = await store.schema_version()
        except Exception as e:
            raise StoreFailureError(e) from e
        _check_version(snapshot, expected)
        _verify_checksum(raw, snapshot.checksum)
        counts = await _replace_tables(store, snapshot)
    except RestoreError as e:
        logger.error("Restore failed (%s): %s", e.kind.value, e)
        await _append_audit(
            audit,
            AuditRecord(
                actor_id=actor_id,
                actor_name=actor_name,
                action=AuditAction.RESTORE_FAILED,
                timestamp=datetime.now(timezone.utc).isoformat(),
                label=label,
                file_name=source_name,
                file_size=size,
                checksum=snapshot.checksum if snapshot else None,
                schema_version=snapshot.schema_version if snapshot else None,
                details={"error_kind": e.kind.value, "reason": str(e)},
            ),
        )
        # Cancellation and interpreter exits propagate once audited.
        if isinstance(e, StoreFailureError) and not isinstance(e.cause, Exception):
            raise e.cause
        return RestoreResult(
            success=False,
            error_kind=e.kind,
            error=str(e),
            expected_version=getattr(e, "expected", expected),
            found_version=snapshot.schema_version if snapshot else None,
        )

    if AUDIT_TABLE in snapshot.tables:
        logger.debug("Ignoring '%s' table found in backup", AUDIT_TABLE)

    await _append_audit(
        audit,
        AuditRecord(
            actor_id=actor_id,
            actor_name=actor_name,
            action=AuditAction.RESTORE_COMPLETED,
            timestamp=datetime.now(timezone.utc).isoformat(),
            label=label,
            file_name=source_name,
            file_size=size,
            checksum=snapshot.checksum,
            schema_version=snapshot.schema_version,
            details={
                "original_backup_date": snapshot.created_at,
                "original_backup_by": snapshot.created_by,
                "original_backup_by_name": snapshot.created_by_name,
                "restored_by": actor_id,
                "restored_by_name": actor_name,
                "table_counts": counts,
            },
        ),
    )
    logger.info(
        "Restored backup from %s (%d rows)", snapshot.created_at, sum(counts.values())
    )

    return RestoreResult(success=True, table_counts=counts)
