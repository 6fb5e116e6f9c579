"""
Timeout Example

Demonstrates waiting for a lock with a deadline:
- A background session holds the lock for a while
- A short timeout fails with LockTimeoutError, and nothing is held
- A longer timeout succeeds once the background session lets go

Set DATABASE_URL to run against PostgreSQL; otherwise the in-memory backend
is used.

Run with: python examples/timeout.py
"""

import asyncio
import os

from pglock import (
    InMemoryLockBackend,
    LockBackend,
    LockTimeoutError,
    PostgreSQLLockBackend,
    open_lock,
)

LOCK_KEY = 400
HOLD_SECONDS = 1.5


def create_backend() -> LockBackend:
    url = os.environ.get("DATABASE_URL")
    if url:
        return PostgreSQLLockBackend.from_url(url, enable_tracing=False)
    return InMemoryLockBackend()


async def process_with_timeout(backend: LockBackend, timeout: float) -> None:
    async with await open_lock(backend, LOCK_KEY, enable_tracing=False) as lock:
        print(f"   Attempting to acquire lock with {timeout}s timeout...")
        async with lock.hold(timeout=timeout):
            print("   Lock acquired, processing...")
            await asyncio.sleep(0.2)
            print("   Processing complete")


async def hold_in_background(backend: LockBackend, acquired: asyncio.Event) -> None:
    async with await open_lock(backend, LOCK_KEY, enable_tracing=False) as lock:
        await lock.lock()
        print(f"   Background lock acquired (held for {HOLD_SECONDS}s)")
        acquired.set()
        await asyncio.sleep(HOLD_SECONDS)
    print("   Background lock released")


async def main() -> None:
    print("=" * 60)
    print("Timeout Example")
    print("=" * 60)

    backend = create_backend()

    acquired = asyncio.Event()
    holder = asyncio.create_task(hold_in_background(backend, acquired))
    await acquired.wait()

    print("\nTest 1: short timeout (should fail)")
    try:
        await process_with_timeout(backend, 0.5)
    except LockTimeoutError as e:
        print(f"   Expected failure: {e}")

    print("\nTest 2: long timeout (should succeed)")
    await process_with_timeout(backend, 5.0)
    print("   Successfully acquired lock with timeout")

    await holder
    if isinstance(backend, PostgreSQLLockBackend):
        await backend.dispose()

    print("\n" + "=" * 60)
    print("Example completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
