"""In-memory domain store.

``InMemoryStore`` keeps every table as a list of dicts.  It backs
browser-local style deployments that have no database file, and tests.
Transactions work on a private deep copy of the tables and swap it in on
commit, so a rollback never leaves partial writes behind.  The audit table
is the exception: commit keeps the live one.

Usage:
    from tindatrack.adapters.memory import InMemoryStore

    store = InMemoryStore({"products": [{"product_id": 1, "name": "Coke"}]})
    rows = await store.read_all("products")
"""

import copy
from typing import Any

from tindatrack.schema.tables import AUDIT_TABLE, PRIMARY_KEYS, SCHEMA_VERSION, metadata


def _check_table(name: str) -> str:
    if name not in metadata.tables:
        raise KeyError(f"Unknown table: {name}")
    return name


def _check_columns(table: str, row: dict) -> None:
    columns = metadata.tables[table].columns
    unknown = [k for k in row if k not in columns]
    if unknown:
        raise ValueError(f"Unknown column(s) for {table}: {', '.join(unknown)}")


class InMemoryTransaction:
    """``StoreTransaction`` over a copy of an ``InMemoryStore``'s tables."""

    def __init__(self, store: "InMemoryStore") -> None:
        self._store = store
        self._tables = copy.deepcopy(store._tables)
        self._done = False

    async def clear(self, table: str) -> None:
        self._tables[_check_table(table)] = []

    async def bulk_insert(self, table: str, rows: list[dict]) -> None:
        _check_table(table)
        target = self._tables.setdefault(table, [])
        for row in rows:
            _check_columns(table, row)
            target.append(dict(row))

    async def commit(self) -> None:
        if self._done:
            return
        # Audit rows appended while the transaction was open stay.
        if AUDIT_TABLE in self._store._tables:
            self._tables[AUDIT_TABLE] = self._store._tables[AUDIT_TABLE]
        self._store._tables = self._tables
        self._done = True

    async def rollback(self) -> None:
        self._tables = {}
        self._done = True

    async def __aenter__(self) -> "InMemoryTransaction":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            await self.commit()
        else:
            await self.rollback()


class InMemoryStore:
    """Dict-of-lists implementation of the ``DomainStore`` protocol.

    Args:
        tables: Optional initial rows per table.  Every known table starts
            empty when not given.
        schema_version: Version reported by ``schema_version()``.
        missing_tables: Table names to leave out entirely, to model a
            degraded store whose reads of those tables fail.
    """

    def __init__(
        self,
        tables: dict[str, list[dict]] | None = None,
        schema_version: int = SCHEMA_VERSION,
        missing_tables: set[str] | None = None,
    ) -> None:
        self._version = schema_version
        missing = missing_tables or set()
        self._tables: dict[str, list[dict]] = {
            name: [] for name in metadata.tables if name not in missing
        }
        for name, rows in (tables or {}).items():
            _check_table(name)
            self._tables[name] = [dict(r) for r in rows]

    async def list_tables(self) -> list[str]:
        return list(self._tables)

    async def read_all(self, table: str) -> list[dict]:
        _check_table(table)
        if table not in self._tables:
            raise LookupError(f"Table {table} does not exist in this store")
        return [dict(r) for r in self._tables[table]]

    async def schema_version(self) -> int:
        return self._version

    async def begin_transaction(self) -> InMemoryTransaction:
        return InMemoryTransaction(self)

    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        rows = await self.read_all(table)
        if filters:
            rows = [r for r in rows if all(r.get(k) == v for k, v in filters.items())]
        if order_by:
            rows.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by)), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return rows

    async def insert(self, table: str, data: dict) -> dict:
        _check_table(table)
        _check_columns(table, data)
        rows = self._tables.setdefault(table, [])
        row = dict(data)
        pk = PRIMARY_KEYS[table]
        if row.get(pk) is None:
            row[pk] = max((r.get(pk) or 0 for r in rows), default=0) + 1
        rows.append(row)
        return dict(row)

    async def close(self) -> None:
        pass
