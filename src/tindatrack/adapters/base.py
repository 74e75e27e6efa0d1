"""Domain store protocol definitions.

Defines the ``DomainStore`` and ``StoreTransaction`` Protocols that every
store must implement.  All methods are ``async def``.

Usage:
    from tindatrack.adapters.base import DomainStore

    async def copy_products(store: DomainStore) -> None:
        rows = await store.read_all("products")
        async with await store.begin_transaction() as tx:
            await tx.clear("products")
            await tx.bulk_insert("products", rows)
"""

from typing import Any, Protocol


class StoreTransaction(Protocol):
    """All-or-nothing multi-table write transaction.

    Nothing written through the transaction is visible to other readers
    until ``commit()``.  ``rollback()`` discards every write made through
    it.  Used as an async context manager, the transaction commits on a
    clean exit and rolls back when the block raises.
    """

    async def clear(self, table: str) -> None:
        """Delete every row from *table*."""
        ...

    async def bulk_insert(self, table: str, rows: list[dict]) -> None:
        """Insert *rows* into *table* as given (primary keys included).

        Raises:
            Exception: If any row violates a constraint.  The transaction
                must then be rolled back by the caller.
        """
        ...

    async def commit(self) -> None:
        """Make every write visible and end the transaction."""
        ...

    async def rollback(self) -> None:
        """Discard every write and end the transaction."""
        ...

    async def __aenter__(self) -> "StoreTransaction": ...

    async def __aexit__(self, exc_type, exc, tb) -> None: ...


class DomainStore(Protocol):
    """Relational store holding the TindaTrack tables.

    Table names are validated against the fixed table set; unknown names
    raise ``KeyError`` before the store is touched.
    """

    async def list_tables(self) -> list[str]:
        """Return the names of the tables this store actually holds."""
        ...

    async def read_all(self, table: str) -> list[dict]:
        """Return every row of *table*, unfiltered and unpaginated.

        Raises:
            KeyError: If *table* is not a known table name.
            Exception: If the table cannot be read (e.g., missing in a
                degraded store).
        """
        ...

    async def schema_version(self) -> int:
        """Return the integer schema version stamped on the store."""
        ...

    async def begin_transaction(self) -> StoreTransaction:
        """Open a write transaction spanning every table."""
        ...

    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        """Select rows from *table*.

        Args:
            table: Table name.
            filters: Optional dict of column=value filters (all must match).
            order_by: Optional column name to sort by.
            descending: Sort descending when ``order_by`` is given.
            limit: Optional maximum number of rows.

        Returns:
            List of dicts, one per row.  Empty list if no matches.

        Example:
            rows = await store.select(
                "backup",
                filters={"backup_type": "BACKUP_CREATED"},
                order_by="backup_id",
                descending=True,
                limit=1,
            )
        """
        ...

    async def insert(self, table: str, data: dict) -> dict:
        """Insert a row, committing immediately, and return the stored row.

        Raises:
            Exception: If duplicate key or constraint violation.
        """
        ...

    async def close(self) -> None:
        """Release connections and other resources."""
        ...
