"""Snapshot, audit and result models for backup/restore.

The ``Snapshot`` model mirrors the exported JSON document field for field
(camelCase aliases on the wire, snake_case in Python).

Usage:
    from tindatrack.backup.models import Snapshot

    snapshot = Snapshot.model_validate_json(document)
    snapshot.tables["products"]
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

from tindatrack.schema.tables import AUDIT_TABLE, DOMAIN_TABLES

Scalar = str | int | float | bool | None


class Snapshot(BaseModel):
    """Point-in-time capture of every domain table plus its checksum."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    schema_version: StrictInt = Field(alias="schemaVersion")
    created_at: str = Field(alias="createdAt")
    created_by: int | str = Field(alias="createdBy")
    created_by_name: str = Field(default="System", alias="createdByName")
    tables: dict[str, list[dict[str, Scalar]]]
    checksum: str

    @field_validator("tables")
    @classmethod
    def _known_tables_only(cls, v: dict[str, list[dict]]) -> dict[str, list[dict]]:
        # The audit table is tolerated so older exports still parse; the
        # engine never restores it.
        unknown = sorted(set(v) - set(DOMAIN_TABLES) - {AUDIT_TABLE})
        if unknown:
            raise ValueError(f"Unknown table(s) in snapshot: {', '.join(unknown)}")
        return v

    def content(self) -> dict[str, Any]:
        """Everything the checksum covers: the wire form minus ``checksum``."""
        return self.model_dump(by_alias=True, exclude={"checksum"})

    def to_document(self) -> str:
        """Serialize to the exported JSON text."""
        return self.model_dump_json(by_alias=True, indent=2)


class BackupErrorKind(str, Enum):
    EMPTY_LABEL = "empty_label"
    NO_TABLES_READ = "no_tables_read"
    STORE_FAILURE = "store_failure"


class RestoreErrorKind(str, Enum):
    MALFORMED_DOCUMENT = "malformed_document"
    SCHEMA_MISMATCH = "schema_mismatch"
    CHECKSUM_MISMATCH = "checksum_mismatch"
    STORE_FAILURE = "store_failure"


class BackupResult(BaseModel):
    """Result of ``create_backup()``.

    On success ``document`` holds the serialized snapshot to hand to the
    caller; nothing is kept in memory or on disk by the engine.
    """

    success: bool
    document: str | None = None
    file_name: str | None = None
    size_bytes: int = 0
    checksum: str | None = None
    table_counts: dict[str, int] = Field(default_factory=dict)
    skipped_tables: list[str] = Field(default_factory=list)
    error_kind: BackupErrorKind | None = None
    error: str | None = None


class RestoreResult(BaseModel):
    """Result of ``restore_backup()``."""

    success: bool
    table_counts: dict[str, int] = Field(default_factory=dict)
    error_kind: RestoreErrorKind | None = None
    error: str | None = None
    expected_version: int | None = None
    found_version: int | None = None
