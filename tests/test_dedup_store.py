"""Tests for the expiring processing lock stores."""

import asyncio

import pytest

from bidbot.dedup.store import InMemoryDedupStore, SqlDedupStore, create_dedup_store

from conftest import make_settings


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture(params=["memory", "sql"])
def store_and_clock(request, tmp_path):
    clock = FakeClock()
    if request.param == "memory":
        store = InMemoryDedupStore(clock=clock)
    else:
        store = SqlDedupStore(f"sqlite:///{tmp_path / 'locks.db'}", clock=clock)
    yield store, clock
    if isinstance(store, SqlDedupStore):
        store.close()


class TestDedupStore:
    """Behaviour shared by every store backend."""

    def test_set_get_exists(self, store_and_clock):
        store, _ = store_and_clock

        async def scenario():
            assert await store.exists("k") is False
            assert await store.get("k") is None
            await store.set("k", "2024-05-01T09:00:00+00:00", 60)
            assert await store.exists("k") is True
            assert await store.get("k") == "2024-05-01T09:00:00+00:00"

        asyncio.run(scenario())

    def test_expired_key_is_absent(self, store_and_clock):
        store, clock = store_and_clock

        async def scenario():
            await store.set("k", "v", 60)
            clock.now += 59
            assert await store.exists("k") is True
            clock.now += 1
            assert await store.exists("k") is False
            assert await store.get("k") is None

        asyncio.run(scenario())

    def test_key_without_ttl_never_expires(self, store_and_clock):
        store, clock = store_and_clock

        async def scenario():
            await store.set("k", "v")
            clock.now += 10 ** 9
            assert await store.exists("k") is True

        asyncio.run(scenario())

    def test_set_overwrites(self, store_and_clock):
        store, _ = store_and_clock

        async def scenario():
            await store.set("k", "first", 60)
            await store.set("k", "second", 60)
            assert await store.get("k") == "second"

        asyncio.run(scenario())

    def test_delete(self, store_and_clock):
        store, _ = store_and_clock

        async def scenario():
            await store.set("k", "v", 60)
            await store.delete("k")
            assert await store.exists("k") is False
            await store.delete("missing")

        asyncio.run(scenario())

    def test_delete_prefix(self, store_and_clock):
        store, _ = store_and_clock

        async def scenario():
            await store.set("announcement:processing:1", "a", 60)
            await store.set("announcement:processing:2", "b", 60)
            await store.set("cert:base64:x", "c", 60)
            removed = await store.delete_prefix("announcement:processing:")
            assert removed == 2
            assert await store.exists("cert:base64:x") is True

        asyncio.run(scenario())


class TestSqlDedupStore:
    def test_locks_survive_new_instance(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'nested' / 'locks.db'}"

        async def scenario():
            first = SqlDedupStore(url)
            await first.set("announcement:processing:7", "ts", 3600)
            first.close()

            second = SqlDedupStore(url)
            try:
                assert await second.get("announcement:processing:7") == "ts"
            finally:
                second.close()

        asyncio.run(scenario())


class TestCreateDedupStore:
    def test_memory_backend(self, tmp_path):
        store = create_dedup_store(make_settings(tmp_path, dedup_backend="memory"))
        assert isinstance(store, InMemoryDedupStore)

    def test_sql_backend(self, tmp_path):
        settings = make_settings(
            tmp_path, dedup_backend="sql", database_url=f"sqlite:///{tmp_path / 'x.db'}"
        )
        store = create_dedup_store(settings)
        assert isinstance(store, SqlDedupStore)
        store.close()
