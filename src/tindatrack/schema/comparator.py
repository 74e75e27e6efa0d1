"""Compare a store's tables and columns against ``schema.tables``.

Pure logic -- the caller supplies the store's column map and version.

Usage:
    from tindatrack.schema.comparator import validate_schema
    from tindatrack.schema.tables import SCHEMA_VERSION, expected_columns

    report = validate_schema(
        await store.column_names(),
        expected_columns(),
        actual_version=await store.schema_version(),
        expected_version=SCHEMA_VERSION,
    )
    if not report.valid:
        console.print(report.format_report())
"""

from tindatrack.schema.models import MissingColumn, SchemaValidationResult


def validate_schema(
    actual_columns: dict[str, set[str]],
    expected_columns: dict[str, set[str]],
    actual_version: int | None = None,
    expected_version: int | None = None,
) -> SchemaValidationResult:
    """Check that every expected table and column exists in the store.

    Columns the store has beyond the expected ones are fine, and so are
    extra tables (they are only listed).  A version mismatch is checked
    only when both versions are given.

    Args:
        actual_columns: ``{table: {column, ...}}`` read from the store.
        expected_columns: ``{table: {column, ...}}`` the store must have.
        actual_version: Version stamped on the store.
        expected_version: Version this package writes.

    Examples:
        >>> report = validate_schema(
        ...     {"users": {"user_id"}},
        ...     {"users": {"user_id", "username"}},
        ... )
        >>> report.valid, report.missing_columns[0].qualified_name
        (False, 'users.username')
    """
    present = actual_columns.keys()
    wanted = expected_columns.keys()

    missing_columns = [
        MissingColumn(table=table, column=column)
        for table in sorted(wanted & present)
        for column in sorted(expected_columns[table] - actual_columns[table])
    ]

    report = SchemaValidationResult(
        valid=False,
        missing_tables=sorted(wanted - present),
        missing_columns=missing_columns,
        extra_tables=sorted(present - wanted),
        expected_version=expected_version,
        actual_version=actual_version,
    )
    report.valid = report.error_count == 0
    return report
