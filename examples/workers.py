"""
Workers Example

Five concurrent workers compete for the same lock. Each waits its turn with
lock(), so the critical sections run one after another.

Set DATABASE_URL to run against PostgreSQL; otherwise the in-memory backend
is used.

Run with: python examples/workers.py
"""

import asyncio
import os

from pglock import InMemoryLockBackend, LockBackend, PostgreSQLLockBackend, open_lock

LOCK_KEY = 500
WORKERS = 5


def create_backend() -> LockBackend:
    url = os.environ.get("DATABASE_URL")
    if url:
        # One pooled connection per concurrently open lock
        return PostgreSQLLockBackend.from_url(url, pool_size=WORKERS, enable_tracing=False)
    return InMemoryLockBackend()


async def run_worker(worker_id: int, backend: LockBackend, active: list[int]) -> None:
    async with await open_lock(backend, LOCK_KEY, enable_tracing=False) as lock:
        print(f"Worker {worker_id}: waiting for lock...")
        await lock.lock()

        active.append(worker_id)
        assert len(active) == 1, f"workers overlapped: {active}"
        print(f"Worker {worker_id}: acquired lock, processing...")
        await asyncio.sleep(0.2)
        active.remove(worker_id)

        print(f"Worker {worker_id}: releasing lock")
        await lock.unlock()


async def main() -> None:
    print(f"Starting {WORKERS} concurrent workers...")
    print("They will compete for the same lock and execute sequentially.\n")

    backend = create_backend()
    active: list[int] = []
    await asyncio.gather(*(run_worker(i, backend, active) for i in range(1, WORKERS + 1)))

    if isinstance(backend, PostgreSQLLockBackend):
        await backend.dispose()

    print("\nAll workers completed!")


if __name__ == "__main__":
    asyncio.run(main())
