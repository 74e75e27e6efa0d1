"""Async SQLite domain store.

Provides ``AsyncSQLiteStore``, the file-based implementation of the
``DomainStore`` protocol, using SQLAlchemy's async engine with the
``aiosqlite`` driver.

Usage:
    from tindatrack.adapters.sqlite import AsyncSQLiteStore

    store = AsyncSQLiteStore("sqlite:///tindatrack.db")
    await store.create_schema()
    rows = await store.read_all("products")
    await store.close()
"""

import itertools
import logging
from datetime import date, datetime
from typing import Any

from sqlalchemy import Table, event, insert, inspect, select, text
from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncEngine,
    AsyncTransaction,
    create_async_engine,
)

from tindatrack.schema.tables import SCHEMA_VERSION, metadata

logger = logging.getLogger(__name__)


def normalize_sqlite_url(database_url: str) -> str:
    """Normalize a SQLite URL or bare file path to the aiosqlite scheme.

    Examples:
        >>> normalize_sqlite_url("sqlite:///store.db")
        'sqlite+aiosqlite:///store.db'
        >>> normalize_sqlite_url("data/store.db")
        'sqlite+aiosqlite:///data/store.db'
    """
    url = database_url.strip()
    if url.startswith("sqlite+aiosqlite://"):
        return url
    if url.startswith("sqlite://"):
        return "sqlite+aiosqlite://" + url[len("sqlite://"):]
    if "://" in url:
        raise ValueError(f"Unsupported database URL for SQLite store: {database_url}")
    return f"sqlite+aiosqlite:///{url}"


def _table(name: str) -> Table:
    """Look up a known table, refusing names outside the fixed table set."""
    try:
        return metadata.tables[name]
    except KeyError:
        raise KeyError(f"Unknown table: {name}") from None


def _serialize_value(value: Any) -> Any:
    """Convert result values to JSON-compatible scalars."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _serialize_row(row: dict) -> dict:
    return {k: _serialize_value(v) for k, v in row.items()}


class SQLiteTransaction:
    """``StoreTransaction`` over a single SQLite connection.

    Opened by ``AsyncSQLiteStore.begin_transaction()``.  Every write runs on
    the same connection inside one ``BEGIN``/``COMMIT``, so a rollback
    leaves every table as it was.
    """

    def __init__(self, conn: AsyncConnection, tx: AsyncTransaction) -> None:
        self._conn = conn
        self._tx = tx
        self._done = False

    async def clear(self, table: str) -> None:
        await self._conn.execute(_table(table).delete())

    async def bulk_insert(self, table: str, rows: list[dict]) -> None:
        if not rows:
            return
        t = _table(table)
        # executemany binds by the first row's keys, so batch rows sharing
        # the same column set.
        for _, group in itertools.groupby(rows, key=lambda r: tuple(r.keys())):
            await self._conn.execute(insert(t), [dict(r) for r in group])

    async def commit(self) -> None:
        if self._done:
            return
        try:
            await self._tx.commit()
        finally:
            self._done = True
            await self._conn.close()

    async def rollback(self) -> None:
        if self._done:
            return
        try:
            await self._tx.rollback()
        finally:
            self._done = True
            await self._conn.close()

    async def __aenter__(self) -> "SQLiteTransaction":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            await self.commit()
        else:
            await self.rollback()


class AsyncSQLiteStore:
    """Async SQLite implementation of the ``DomainStore`` protocol.

    The schema version lives in SQLite's ``PRAGMA user_version`` header
    field.  Foreign-key enforcement is switched on for every connection
    unless ``foreign_keys=False``.

    Args:
        database_url: ``sqlite:///path``, ``sqlite+aiosqlite:///path`` or a
            bare file path.  Normalized to ``sqlite+aiosqlite://``.
        foreign_keys: Enforce foreign-key constraints (default ``True``).
        **engine_kwargs: Forwarded to ``create_async_engine``.

    Example:
        store = AsyncSQLiteStore("tindatrack.db")
        await store.create_schema()
        await store.insert("categories", {"name": "Beverages"})
        await store.close()
    """

    def __init__(
        self,
        database_url: str,
        foreign_keys: bool = True,
        **engine_kwargs: Any,
    ) -> None:
        self.url = normalize_sqlite_url(database_url)
        self._engine: AsyncEngine = create_async_engine(
            self.url, **{"echo": False, **engine_kwargs}
        )

        if foreign_keys:
            @event.listens_for(self._engine.sync_engine, "connect")
            def _enable_foreign_keys(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    async def create_schema(self, version: int = SCHEMA_VERSION) -> None:
        """Create any missing tables and stamp the schema version."""
        async with self._engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
            await conn.execute(text(f"PRAGMA user_version = {int(version)}"))
        logger.info("Schema ready at %s (version %d)", self.url, version)

    async def schema_version(self) -> int:
        async with self._engine.connect() as conn:
            result = await conn.execute(text("PRAGMA user_version"))
            return int(result.scalar() or 0)

    async def list_tables(self) -> list[str]:
        async with self._engine.connect() as conn:
            return await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).get_table_names()
            )

    async def column_names(self) -> dict[str, set[str]]:
        """Return ``{table: {column, ...}}`` for every table in the file."""

        def _collect(sync_conn) -> dict[str, set[str]]:
            inspector = inspect(sync_conn)
            return {
                name: {c["name"] for c in inspector.get_columns(name)}
                for name in inspector.get_table_names()
            }

        async with self._engine.connect() as conn:
            return await conn.run_sync(_collect)

    # ------------------------------------------------------------------
    # Reads and writes
    # ------------------------------------------------------------------

    async def read_all(self, table: str) -> list[dict]:
        return await self.select(table)

    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        t = _table(table)
        query = select(t)
        for column, value in (filters or {}).items():
            query = query.where(t.c[column] == value)
        if order_by:
            query = query.order_by(t.c[order_by].desc() if descending else t.c[order_by])
        if limit is not None:
            query = query.limit(limit)

        async with self._engine.connect() as conn:
            result = await conn.execute(query)
            return [_serialize_row(dict(row)) for row in result.mappings()]

    async def insert(self, table: str, data: dict) -> dict:
        """Insert a row and return it with generated columns filled in.

        Uses ``engine.begin()`` for automatic commit on success, rollback on
        error.
        """
        t = _table(table)
        async with self._engine.begin() as conn:
            result = await conn.execute(insert(t).values(**data).returning(*t.c))
            return _serialize_row(dict(result.mappings().one()))

    async def begin_transaction(self) -> SQLiteTransaction:
        conn = await self._engine.connect()
        try:
            tx = await conn.begin()
        except Exception:
            await conn.close()
            raise
        return SQLiteTransaction(conn, tx)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def test_connection(self) -> bool:
        """Run ``SELECT 1`` to verify the database file can be opened."""
        async with self._engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            return result.scalar() == 1

    async def close(self) -> None:
        """Dispose of the engine and its connection pool."""
        await self._engine.dispose()
