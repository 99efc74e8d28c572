"""Key/value stores with per-key expiry used for processing locks.

Every store exposes the same four single-key coroutines. Expired keys
behave exactly like missing keys.
"""

import asyncio
import time
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol, Tuple

from sqlalchemy import Column, Float, String, Text, create_engine, delete, select
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from bidbot.core.logging import get_logger
from bidbot.settings import Settings

logger = get_logger("dedup.store")

Base = declarative_base()


class DedupStore(Protocol):
    """Interface shared by all lock stores."""

    async def exists(self, key: str) -> bool: ...

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def delete_prefix(self, prefix: str) -> int: ...


class InMemoryDedupStore:
    """Process-local store. Locks do not survive a restart."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: Dict[str, Tuple[str, Optional[float]]] = {}

    def _live_entry(self, key: str) -> Optional[Tuple[str, Optional[float]]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._entries[key]
            logger.debug("In-memory GET: %s (expired)", key)
            return None
        return entry

    async def exists(self, key: str) -> bool:
        return self._live_entry(key) is not None

    async def get(self, key: str) -> Optional[str]:
        entry = self._live_entry(key)
        return entry[0] if entry else None

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        expires_at = self._clock() + ttl_seconds if ttl_seconds else None
        self._entries[key] = (value, expires_at)
        logger.debug("In-memory SET: %s (TTL: %s)", key, ttl_seconds or "none")

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)
        logger.debug("In-memory DEL: %s", key)

    async def delete_prefix(self, prefix: str) -> int:
        keys = [key for key in self._entries if key.startswith(prefix)]
        for key in keys:
            del self._entries[key]
        return len(keys)


class ProcessingLockRow(Base):
    __tablename__ = "processing_locks"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    expires_at = Column(Float, nullable=True)  # epoch seconds, NULL = no expiry


class SqlDedupStore:
    """Durable store backed by a SQL table.

    Blocking session work runs in a worker thread so the event loop
    keeps serving other coroutines.
    """

    def __init__(self, database_url: str, clock: Callable[[], float] = time.time):
        """Initialize the store and create the table if needed.

        Args:
            database_url: SQLAlchemy database URL
            clock: Time source returning epoch seconds
        """
        url = make_url(database_url)
        if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

        self._engine = create_engine(database_url, pool_pre_ping=True, echo=False)
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self._engine)
        self._clock = clock
        Base.metadata.create_all(self._engine)

    def _get_sync(self, key: str) -> Optional[str]:
        with self._session_factory() as session:
            row = session.get(ProcessingLockRow, key)
            if row is None:
                return None
            if row.expires_at is not None and self._clock() >= row.expires_at:
                session.delete(row)
                session.commit()
                logger.debug("SQL GET: %s (expired)", key)
                return None
            return row.value

    def _set_sync(self, key: str, value: str, ttl_seconds: Optional[int]) -> None:
        expires_at = self._clock() + ttl_seconds if ttl_seconds else None
        with self._session_factory() as session:
            session.merge(ProcessingLockRow(key=key, value=value, expires_at=expires_at))
            session.commit()
        logger.debug("SQL SET: %s (TTL: %s)", key, ttl_seconds or "none")

    def _delete_sync(self, key: str) -> None:
        with self._session_factory() as session:
            session.execute(delete(ProcessingLockRow).where(ProcessingLockRow.key == key))
            session.commit()
        logger.debug("SQL DEL: %s", key)

    def _delete_prefix_sync(self, prefix: str) -> int:
        with self._session_factory() as session:
            keys = session.scalars(
                select(ProcessingLockRow.key).where(ProcessingLockRow.key.startswith(prefix))
            ).all()
            if keys:
                session.execute(delete(ProcessingLockRow).where(ProcessingLockRow.key.in_(keys)))
                session.commit()
            return len(keys)

    async def exists(self, key: str) -> bool:
        return await asyncio.to_thread(self._get_sync, key) is not None

    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._get_sync, key)

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        await asyncio.to_thread(self._set_sync, key, value, ttl_seconds)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete_sync, key)

    async def delete_prefix(self, prefix: str) -> int:
        return await asyncio.to_thread(self._delete_prefix_sync, prefix)

    def close(self) -> None:
        self._engine.dispose()


def create_dedup_store(settings: Settings) -> DedupStore:
    """Build the store selected by `settings.dedup_backend`."""
    if settings.dedup_backend == "sql":
        logger.info("Using SQL dedup store")
        return SqlDedupStore(settings.database_url)
    logger.info("Using in-memory dedup store")
    return InMemoryDedupStore()
