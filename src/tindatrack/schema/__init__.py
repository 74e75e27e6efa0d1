"""Table definitions and schema checks.

Usage:
    from tindatrack.schema import DOMAIN_TABLES, SCHEMA_VERSION, validate_schema
"""

from tindatrack.schema.comparator import validate_schema
from tindatrack.schema.models import MissingColumn, SchemaValidationResult
from tindatrack.schema.tables import (
    AUDIT_TABLE,
    DOMAIN_TABLES,
    PRIMARY_KEYS,
    SCHEMA_VERSION,
    expected_columns,
    metadata,
)

__all__ = [
    "validate_schema",
    "MissingColumn",
    "SchemaValidationResult",
    "AUDIT_TABLE",
    "DOMAIN_TABLES",
    "PRIMARY_KEYS",
    "SCHEMA_VERSION",
    "expected_columns",
    "metadata",
]
