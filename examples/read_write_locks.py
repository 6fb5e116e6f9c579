"""
Read-Write Locks Example

Demonstrates shared (read) and exclusive (write) locks on one key:
- Multiple readers hold shared locks at the same time
- A writer blocks all readers and other writers
- Readers that arrive while a writer holds the key wait for it

Set DATABASE_URL to run against PostgreSQL; otherwise the in-memory backend
is used.

Run with: python examples/read_write_locks.py
"""

import asyncio
import os
import time

from pglock import (
    InMemoryLockBackend,
    LockBackend,
    LockMode,
    PostgreSQLLockBackend,
    lock_key,
    open_lock,
)

STARTED = time.monotonic()


def log(message: str) -> None:
    print(f"   [{time.monotonic() - STARTED:5.2f}s] {message}")


def create_backend() -> LockBackend:
    url = os.environ.get("DATABASE_URL")
    if url:
        return PostgreSQLLockBackend.from_url(url, pool_size=10, enable_tracing=False)
    return InMemoryLockBackend()


class DataCache:
    """A cached record guarded by a read-write advisory lock."""

    def __init__(self, backend: LockBackend, record_id: str) -> None:
        self._backend = backend
        self._record_id = record_id
        self._key = lock_key(record_id, namespace="cache")

    async def read(self, reader_id: int) -> str:
        async with await open_lock(self._backend, self._key, enable_tracing=False) as lock:
            log(f"Reader {reader_id}: waiting for shared lock...")
            async with lock.hold(LockMode.SHARED):
                log(f"Reader {reader_id}: acquired shared lock, reading")
                await asyncio.sleep(0.3)
                log(f"Reader {reader_id}: done")
                return f"cached-data-for-{self._record_id}"

    async def write(self, data: str) -> None:
        async with await open_lock(self._backend, self._key, enable_tracing=False) as lock:
            log("Writer: waiting for exclusive lock...")
            async with lock.hold(LockMode.EXCLUSIVE):
                log(f"Writer: acquired exclusive lock, writing {data!r}")
                await asyncio.sleep(0.5)
                log("Writer: done")


async def main() -> None:
    print("=" * 60)
    print("Read-Write Lock Example")
    print("=" * 60)

    backend = create_backend()
    cache = DataCache(backend, "user-123")

    print("\nScenario 1: three concurrent readers")
    print("Expected: all three read at the same time")
    await asyncio.gather(*(cache.read(i) for i in range(1, 4)))

    print("\nScenario 2: writer first, then readers")
    print("Expected: readers wait until the writer is done")
    writer = asyncio.create_task(cache.write("new-data"))
    await asyncio.sleep(0.1)
    await asyncio.gather(cache.read(4), cache.read(5), writer)

    print("\nScenario 3: readers first, then a writer")
    print("Expected: the writer waits until every reader is done")
    readers = [asyncio.create_task(cache.read(i)) for i in (6, 7)]
    await asyncio.sleep(0.1)
    await asyncio.gather(cache.write("newer-data"), *readers)

    if isinstance(backend, PostgreSQLLockBackend):
        await backend.dispose()

    print("\n" + "=" * 60)
    print("Example completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
