"""Pydantic models describing how a store's schema differs from the tables
this package defines."""

from pydantic import BaseModel, Field


class MissingColumn(BaseModel):
    """A column the store lacks in a table it does have."""

    table: str
    column: str

    @property
    def qualified_name(self) -> str:
        return f"{self.table}.{self.column}"


class SchemaValidationResult(BaseModel):
    """Outcome of ``validate_schema()``.

    ``extra_tables`` never makes a schema invalid; SQLite keeps its own
    bookkeeping tables next to ours.
    """

    valid: bool
    missing_tables: list[str] = Field(default_factory=list)
    missing_columns: list[MissingColumn] = Field(default_factory=list)
    extra_tables: list[str] = Field(default_factory=list)
    expected_version: int | None = None
    actual_version: int | None = None

    @property
    def version_mismatch(self) -> bool:
        if self.expected_version is None or self.actual_version is None:
            return False
        return self.expected_version != self.actual_version

    @property
    def error_count(self) -> int:
        """Missing tables, missing columns and a version mismatch, each counted once."""
        return (
            len(self.missing_tables)
            + len(self.missing_columns)
            + int(self.version_mismatch)
        )

    def format_report(self) -> str:
        """Plain-text report for the CLI."""
        if self.valid:
            return "Schema valid"

        out = [f"Schema check found {self.error_count} problem(s):"]
        if self.version_mismatch:
            out.append(
                f"\n  Schema version: store has {self.actual_version}, "
                f"expected {self.expected_version}"
            )
        if self.missing_tables:
            out.append(f"\n  Missing tables ({len(self.missing_tables)}):")
            out.extend(f"    - {name}" for name in self.missing_tables)
        if self.missing_columns:
            out.append(f"\n  Missing columns ({len(self.missing_columns)}):")
            out.extend(f"    - {c.qualified_name}" for c in self.missing_columns)
        if self.extra_tables:
            out.append(f"\n  Unrecognised tables (ignored): {', '.join(self.extra_tables)}")
        return "\n".join(out)
