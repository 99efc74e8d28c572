"""Dedup module - expiring key/value stores for processing locks."""

from bidbot.dedup.store import (
    DedupStore,
    InMemoryDedupStore,
    SqlDedupStore,
    create_dedup_store,
)

__all__ = [
    "DedupStore",
    "InMemoryDedupStore",
    "SqlDedupStore",
    "create_dedup_store",
]
