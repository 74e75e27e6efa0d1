"""Append-only audit log for backup/restore actions.

Records live in the ``backup`` table, one row per lifecycle event.  The
backup engine writes to it but never clears or restores it.

Usage:
    from tindatrack.audit import AuditLog

    audit = AuditLog(store)
    await audit.append(record)
    recent = await audit.history(limit=10)
"""

import json
import logging
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from tindatrack.adapters.base import DomainStore
from tindatrack.schema.tables import AUDIT_TABLE

logger = logging.getLogger(__name__)


class AuditAction(str, Enum):
    """Lifecycle events recorded in the audit log."""

    BACKUP_CREATED = "BACKUP_CREATED"
    BACKUP_FAILED = "BACKUP_FAILED"
    RESTORE_COMPLETED = "RESTORE_COMPLETED"
    RESTORE_FAILED = "RESTORE_FAILED"


class AuditRecord(BaseModel):
    """One append-only audit log entry."""

    id: int | None = None
    actor_id: int | str | None = None
    actor_name: str = "System"
    action: AuditAction
    timestamp: str
    label: str | None = None
    file_name: str | None = None
    file_size: int | None = None
    checksum: str | None = None
    schema_version: int | None = None
    details: dict[str, Any] = Field(default_factory=dict)


def _to_row(record: AuditRecord) -> dict:
    return {
        "user_id": None if record.actor_id is None else str(record.actor_id),
        "username": record.actor_name,
        "backup_name": record.label,
        "backup_type": record.action.value,
        "created_at": record.timestamp,
        "schema_version": record.schema_version,
        "file_name": record.file_name,
        "file_size": record.file_size,
        "checksum": record.checksum,
        "details": json.dumps(record.details, default=str),
    }


def _from_row(row: dict) -> AuditRecord:
    details = row.get("details")
    return AuditRecord(
        id=row.get("backup_id"),
        actor_id=row.get("user_id"),
        actor_name=row.get("username") or "System",
        action=AuditAction(row["backup_type"]),
        timestamp=row.get("created_at") or "",
        label=row.get("backup_name"),
        file_name=row.get("file_name"),
        file_size=row.get("file_size"),
        checksum=row.get("checksum"),
        schema_version=row.get("schema_version"),
        details=json.loads(details) if details else {},
    )


class AuditLog:
    """Audit log stored in a ``DomainStore``'s audit table."""

    def __init__(self, store: DomainStore) -> None:
        self._store = store

    async def append(self, record: AuditRecord) -> AuditRecord:
        """Insert *record* and return it with its assigned id."""
        row = await self._store.insert(AUDIT_TABLE, _to_row(record))
        logger.debug(
            "Audit %s by %s (%s)", record.action.value, record.actor_name, record.actor_id
        )
        return record.model_copy(update={"id": row.get("backup_id")})

    async def history(
        self,
        limit: int = 50,
        action: AuditAction | None = None,
    ) -> list[AuditRecord]:
        """Return the most recent records, newest first."""
        filters = {"backup_type": action.value} if action else None
        rows = await self._store.select(
            AUDIT_TABLE,
            filters=filters,
            order_by="backup_id",
            descending=True,
            limit=limit,
        )
        return [_from_row(r) for r in rows]

    async def last_backup_date(self) -> date | None:
        """Calendar date of the newest ``BACKUP_CREATED`` record, if any."""
        records = await self.history(limit=1, action=AuditAction.BACKUP_CREATED)
        if not records:
            return None
        return datetime.fromisoformat(records[0].timestamp).date()
