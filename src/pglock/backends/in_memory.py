"""
In-memory lock backend implementation.

Mirrors the semantics of PostgreSQL session-level advisory locks inside a
single process: per-connection stack counts for exclusive and shared holds,
exclusive/shared compatibility, re-entrant holds, and release of everything
when a connection closes.

Useful for testing and development. It cannot coordinate separate processes.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass

from pglock.exceptions import BackendIOError, ConnectionUnavailableError, LockTimeoutError
from pglock.types import LockKey, LockMode

logger = logging.getLogger(__name__)


@dataclass
class _Holds:
    exclusive: int = 0
    shared: int = 0


@dataclass
class _Waiter:
    connection_id: int
    mode: LockMode
    future: asyncio.Future[None]


class InMemoryLockBackend:
    """
    In-memory implementation of the lock backend.

    Thread-safety:
        Not thread-safe. All connections must be used from the event loop
        that created them.

    Example:
        >>> backend = InMemoryLockBackend(max_connections=10)
        >>> lock = await open_lock(backend, 42)
        >>> assert await lock.try_lock()
        >>> await lock.close()

    Args:
        max_connections: Capacity of the connection source (None = unbounded).
            connect() waits for a free slot when all are in use.
    """

    def __init__(self, *, max_connections: int | None = None) -> None:
        if max_connections is not None and max_connections < 1:
            raise ValueError(f"max_connections must be >= 1, got {max_connections}")
        self._max_connections = max_connections
        self._slots = asyncio.Semaphore(max_connections) if max_connections is not None else None
        self._holds: dict[LockKey, dict[int, _Holds]] = {}
        self._waiters: dict[LockKey, list[_Waiter]] = {}
        self._connections: dict[int, InMemoryLockConnection] = {}
        self._ids = itertools.count(1)

    async def connect(self, *, timeout: float | None = None) -> InMemoryLockConnection:
        """
        Obtain a dedicated connection, waiting for a free slot if bounded.

        Raises:
            ConnectionUnavailableError: If no slot frees up within timeout
        """
        if self._slots is not None:
            try:
                async with asyncio.timeout(timeout):
                    await self._slots.acquire()
            except TimeoutError as e:
                raise ConnectionUnavailableError(
                    timeout,
                    f"all {self._max_connections} connections are in use",
                ) from e

        connection = InMemoryLockConnection(self, next(self._ids))
        self._connections[connection.connection_id] = connection
        return connection

    @property
    def open_connections(self) -> int:
        """Number of connections currently open."""
        return len(self._connections)

    def holds(self, key: LockKey) -> dict[int, tuple[int, int]]:
        """
        Snapshot of the holds on a key.

        Returns:
            Mapping of connection id to (exclusive_count, shared_count)
        """
        return {
            connection_id: (holds.exclusive, holds.shared)
            for connection_id, holds in self._holds.get(key, {}).items()
        }

    def _conflicts(self, key: LockKey, connection_id: int, mode: LockMode) -> bool:
        for holder_id, holds in self._holds.get(key, {}).items():
            # A connection never conflicts with its own holds
            if holder_id == connection_id:
                continue
            if holds.exclusive or (mode is LockMode.EXCLUSIVE and holds.shared):
                return True
        return False

    def _grant(self, key: LockKey, connection_id: int, mode: LockMode) -> None:
        holds = self._holds.setdefault(key, {}).setdefault(connection_id, _Holds())
        if mode is LockMode.EXCLUSIVE:
            holds.exclusive += 1
        else:
            holds.shared += 1

    def _try(self, connection_id: int, key: LockKey, mode: LockMode) -> bool:
        if self._conflicts(key, connection_id, mode):
            return False
        self._grant(key, connection_id, mode)
        return True

    async def _wait(
        self,
        connection_id: int,
        key: LockKey,
        mode: LockMode,
        timeout: float | None,
    ) -> None:
        if self._try(connection_id, key, mode):
            return

        waiter = _Waiter(connection_id, mode, asyncio.get_running_loop().create_future())
        queue = self._waiters.setdefault(key, [])
        queue.append(waiter)

        try:
            done, _ = await asyncio.wait({waiter.future}, timeout=timeout)
        except asyncio.CancelledError:
            future = waiter.future
            if future.done() and not future.cancelled() and future.exception() is None:
                # Granted before the cancellation reached this task
                logger.debug(
                    "Wait granted before cancellation: connection_id=%d, key=%s",
                    connection_id,
                    key,
                )
                return
            raise
        finally:
            # Grants resolve the future synchronously, so a pending future
            # here means nothing was granted.
            if not waiter.future.done():
                queue.remove(waiter)
                waiter.future.cancel()
                if not queue and self._waiters.get(key) is queue:
                    del self._waiters[key]

        if not done:
            raise LockTimeoutError(key, mode, timeout)  # type: ignore[arg-type]
        waiter.future.result()

    def _release(self, connection_id: int, key: LockKey, mode: LockMode) -> bool:
        holders = self._holds.get(key)
        holds = holders.get(connection_id) if holders else None
        if holders is None or holds is None:
            return False

        if mode is LockMode.EXCLUSIVE:
            if holds.exclusive == 0:
                return False
            holds.exclusive -= 1
        else:
            if holds.shared == 0:
                return False
            holds.shared -= 1

        if holds.exclusive == 0 and holds.shared == 0:
            del holders[connection_id]
            if not holders:
                del self._holds[key]
        self._wake(key)
        return True

    def _wake(self, key: LockKey) -> None:
        queue = self._waiters.get(key)
        if not queue:
            return

        for waiter in list(queue):
            if waiter.future.done():
                queue.remove(waiter)
            elif not self._conflicts(key, waiter.connection_id, waiter.mode):
                self._grant(key, waiter.connection_id, waiter.mode)
                waiter.future.set_result(None)
                queue.remove(waiter)

        if not queue:
            del self._waiters[key]

    def _drop(self, connection_id: int) -> None:
        if self._connections.pop(connection_id, None) is None:
            return

        for key, queue in list(self._waiters.items()):
            for waiter in list(queue):
                if waiter.connection_id == connection_id and not waiter.future.done():
                    waiter.future.set_exception(
                        BackendIOError("wait", key, "connection closed while waiting")
                    )
                    queue.remove(waiter)
            if not queue:
                del self._waiters[key]

        released = [key for key, holders in self._holds.items() if connection_id in holders]
        for key in released:
            del self._holds[key][connection_id]
            if not self._holds[key]:
                del self._holds[key]
        for key in released:
            self._wake(key)

        if self._slots is not None:
            self._slots.release()

        logger.debug(
            "In-memory lock connection closed: connection_id=%d, released_keys=%d",
            connection_id,
            len(released),
        )


class InMemoryLockConnection:
    """A dedicated connection to an InMemoryLockBackend."""

    def __init__(self, backend: InMemoryLockBackend, connection_id: int) -> None:
        self._backend = backend
        self.connection_id = connection_id
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self, operation: str, key: LockKey) -> None:
        if self._closed:
            raise BackendIOError(operation, key, "connection is closed")

    async def try_exclusive(self, key: LockKey) -> bool:
        self._ensure_open("try_exclusive", key)
        return self._backend._try(self.connection_id, key, LockMode.EXCLUSIVE)

    async def try_shared(self, key: LockKey) -> bool:
        self._ensure_open("try_shared", key)
        return self._backend._try(self.connection_id, key, LockMode.SHARED)

    async def wait_exclusive(self, key: LockKey, timeout: float | None = None) -> None:
        self._ensure_open("wait_exclusive", key)
        await self._backend._wait(self.connection_id, key, LockMode.EXCLUSIVE, timeout)

    async def wait_shared(self, key: LockKey, timeout: float | None = None) -> None:
        self._ensure_open("wait_shared", key)
        await self._backend._wait(self.connection_id, key, LockMode.SHARED, timeout)

    async def release_exclusive(self, key: LockKey) -> bool:
        self._ensure_open("release_exclusive", key)
        return self._backend._release(self.connection_id, key, LockMode.EXCLUSIVE)

    async def release_shared(self, key: LockKey) -> bool:
        self._ensure_open("release_shared", key)
        return self._backend._release(self.connection_id, key, LockMode.SHARED)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._backend._drop(self.connection_id)

    async def abort(self) -> None:
        await self.close()


__all__ = [
    "InMemoryLockBackend",
    "InMemoryLockConnection",
]
