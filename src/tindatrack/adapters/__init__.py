"""Domain store adapters.

Provides the ``DomainStore`` / ``StoreTransaction`` Protocols and two
async implementations: ``AsyncSQLiteStore`` (file-based) and
``InMemoryStore``.

Usage:
    from tindatrack.adapters import AsyncSQLiteStore, DomainStore, InMemoryStore
"""

from tindatrack.adapters.base import DomainStore, StoreTransaction
from tindatrack.adapters.memory import InMemoryStore
from tindatrack.adapters.sqlite import AsyncSQLiteStore

__all__ = [
    "DomainStore",
    "StoreTransaction",
    "AsyncSQLiteStore",
    "InMemoryStore",
]
