"""
Advisory lock sessions.

An :class:`AdvisoryLock` binds one dedicated backend connection to one lock
key for its whole lifetime. Holds stack: a key acquired three times must be
released three times. Closing the session releases every hold at once,
however unbalanced the acquire/release calls were, so "releasing the lock"
and "ending the session" are the same thing.

Usage:
    >>> async with await open_lock(backend, 42) as lock:
    ...     if await lock.try_lock():
    ...         await do_exclusive_work()
    ...
    ...     async with lock.hold(LockMode.SHARED, timeout=5.0):
    ...         await read_shared_state()

Concurrency:
    A session sends one request at a time over its connection. Operations
    issued concurrently on the same session (from several tasks) are
    serialized by an internal asyncio.Lock, in arrival order. A blocking
    lock() therefore delays every later operation on that session until it
    returns. Use one session per concurrent holder.

Cancellation:
    Blocking acquisitions take a ``timeout``. The deadline is enforced by
    the backend, so the outcome is exact: either the lock was granted and the
    call returns, or LockTimeoutError is raised and nothing is held. The
    session stays usable either way.

    Cancelling the task while a request is in flight (asyncio.timeout,
    wait_for, task.cancel) withdraws the request. If it had not been granted
    yet, CancelledError propagates and the session's holds are exactly what
    they were before the call. If the grant won the race, the call returns
    normally and the hold is reported as taken. Only when the backend cannot
    tell which of the two happened does it abort the connection; the session
    is then closed and every hold it had is released.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from types import TracebackType
from typing import Protocol, TypeVar, runtime_checkable

from pglock.backends.interface import LockBackend, LockConnection
from pglock.exceptions import SessionClosedError
from pglock.observability import (
    ATTR_LOCK_ACQUIRED,
    ATTR_LOCK_KEY,
    ATTR_LOCK_MODE,
    ATTR_LOCK_TIMEOUT,
    Tracer,
    create_tracer,
)
from pglock.types import LockKey, LockMode, validate_lock_key

logger = logging.getLogger(__name__)

T = TypeVar("T")


@runtime_checkable
class Locker(Protocol):
    """
    Protocol for advisory lock sessions.

    Lets callers depend on the operations rather than on AdvisoryLock, e.g.
    to substitute ``AsyncMock(spec=Locker)`` in tests.
    """

    async def try_lock(self) -> bool: ...

    async def try_lock_shared(self) -> bool: ...

    async def lock(self, *, timeout: float | None = None) -> None: ...

    async def lock_shared(self, *, timeout: float | None = None) -> None: ...

    async def unlock(self) -> None: ...

    async def unlock_shared(self) -> None: ...

    async def close(self) -> None: ...


class AdvisoryLock:
    """
    A lock key bound to a dedicated backend connection.

    Create instances with :func:`open_lock`. The session owns its connection
    exclusively until :meth:`close`; after that every operation raises
    SessionClosedError.

    Hold counts live in the backend, never in this object. Every call is one
    round trip.

    Args:
        key: Signed 64-bit lock key
        connection: Connection owned by this session from now on
        tracer: Optional custom Tracer instance
        enable_tracing: Whether to enable OpenTelemetry tracing.
            Ignored if tracer is explicitly provided.
    """

    def __init__(
        self,
        key: LockKey,
        connection: LockConnection,
        *,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._key = validate_lock_key(key)
        self._connection = connection
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._mutex = asyncio.Lock()
        self._closed = False

    @property
    def key(self) -> LockKey:
        """The lock key this session is bound to."""
        return self._key

    @property
    def closed(self) -> bool:
        """True once the session has been closed or aborted."""
        return self._closed

    def __repr__(self) -> str:
        return f"AdvisoryLock(key={self._key}, closed={self._closed})"

    async def __aenter__(self) -> AdvisoryLock:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def try_lock(self) -> bool:
        """
        Try to take an exclusive hold without waiting.

        Returns:
            True if acquired (the exclusive count went up by one), False if
            another session holds the key exclusively or shared. Contention
            is never an error.

        Raises:
            BackendIOError: If the round trip fails
            SessionClosedError: If the session is closed
        """
        return await self._try(LockMode.EXCLUSIVE)

    async def try_lock_shared(self) -> bool:
        """
        Try to take a shared hold without waiting.

        Returns:
            True if acquired, False if another session holds the key
            exclusively.

        Raises:
            BackendIOError: If the round trip fails
            SessionClosedError: If the session is closed
        """
        return await self._try(LockMode.SHARED)

    async def lock(self, *, timeout: float | None = None) -> None:
        """
        Take an exclusive hold, waiting until no other session holds the key.

        If this session already holds the key, the call returns at once.

        Args:
            timeout: Maximum seconds to wait (None = wait forever)

        Raises:
            LockTimeoutError: If the deadline passed; the lock is not held
            BackendIOError: If the round trip fails
            SessionClosedError: If the session is closed
        """
        await self._wait(LockMode.EXCLUSIVE, timeout)

    async def lock_shared(self, *, timeout: float | None = None) -> None:
        """
        Take a shared hold, waiting until no other session holds the key
        exclusively.

        Args:
            timeout: Maximum seconds to wait (None = wait forever)

        Raises:
            LockTimeoutError: If the deadline passed; the lock is not held
            BackendIOError: If the round trip fails
            SessionClosedError: If the session is closed
        """
        await self._wait(LockMode.SHARED, timeout)

    async def unlock(self) -> None:
        """
        Drop one exclusive hold.

        Releasing when no exclusive hold exists is not an error; the backend
        ignores it and a warning is logged. Pairing each unlock with an
        acquire is the caller's responsibility.

        Raises:
            BackendIOError: If the round trip fails
            SessionClosedError: If the session is closed
        """
        await self._release(LockMode.EXCLUSIVE)

    async def unlock_shared(self) -> None:
        """
        Drop one shared hold.

        Same no-op behavior as unlock() when nothing is held. Use it only
        for holds taken with try_lock_shared() or lock_shared().

        Raises:
            BackendIOError: If the round trip fails
            SessionClosedError: If the session is closed
        """
        await self._release(LockMode.SHARED)

    async def close(self) -> None:
        """
        End the session, releasing every hold regardless of its count.

        Safe to call at any time, including after failed operations, and
        more than once. If another operation is in flight, the connection is
        aborted underneath it and that operation raises SessionClosedError.
        If the orderly close fails or is cancelled, the connection is aborted
        before the error propagates.
        """
        if self._closed:
            return
        self._closed = True

        with self._tracer.span("pglock.lock.close", {ATTR_LOCK_KEY: self._key}):
            try:
                if self._mutex.locked():
                    await self._connection.abort()
                else:
                    async with self._mutex:
                        await self._connection.close()
            except BaseException:
                # Later close() calls return early, so this is the last chance
                # to end the server session
                await self._force_abort()
                raise

        logger.debug("Closed lock session: key=%s", self._key)

    @asynccontextmanager
    async def hold(
        self,
        mode: LockMode = LockMode.EXCLUSIVE,
        *,
        timeout: float | None = None,
    ) -> AsyncIterator[AdvisoryLock]:
        """
        Wait for a hold and release it when the block exits.

        Args:
            mode: Exclusive or shared
            timeout: Maximum seconds to wait (None = wait forever)

        Yields:
            This session

        Raises:
            LockTimeoutError: If the hold could not be taken in time

        Example:
            >>> async with lock.hold(timeout=5.0):
            ...     await perform_cutover()
        """
        await self._wait(mode, timeout)
        try:
            yield self
        finally:
            # An aborted session has already dropped the hold
            if not self._closed:
                await self._release(mode)

    async def _try(self, mode: LockMode) -> bool:
        operation = "try_lock" if mode is LockMode.EXCLUSIVE else "try_lock_shared"
        primitive = (
            self._connection.try_exclusive
            if mode is LockMode.EXCLUSIVE
            else self._connection.try_shared
        )

        with self._tracer.span(
            f"pglock.lock.{operation}",
            {ATTR_LOCK_KEY: self._key, ATTR_LOCK_MODE: mode.value},
        ) as span:
            acquired = await self._run(operation, lambda: primitive(self._key))
            if span:
                span.set_attribute(ATTR_LOCK_ACQUIRED, acquired)

        if acquired:
            logger.debug("Acquired advisory lock (try): key=%s, mode=%s", self._key, mode.value)
        return acquired

    async def _wait(self, mode: LockMode, timeout: float | None) -> None:
        operation = "lock" if mode is LockMode.EXCLUSIVE else "lock_shared"
        primitive = (
            self._connection.wait_exclusive
            if mode is LockMode.EXCLUSIVE
            else self._connection.wait_shared
        )

        with self._tracer.span(
            f"pglock.lock.{operation}",
            {
                ATTR_LOCK_KEY: self._key,
                ATTR_LOCK_MODE: mode.value,
                ATTR_LOCK_TIMEOUT: timeout if timeout is not None else -1,
            },
        ):
            await self._run(operation, lambda: primitive(self._key, timeout))

        logger.debug("Acquired advisory lock: key=%s, mode=%s", self._key, mode.value)

    async def _release(self, mode: LockMode) -> None:
        operation = "unlock" if mode is LockMode.EXCLUSIVE else "unlock_shared"
        primitive = (
            self._connection.release_exclusive
            if mode is LockMode.EXCLUSIVE
            else self._connection.release_shared
        )

        with self._tracer.span(
            f"pglock.lock.{operation}",
            {ATTR_LOCK_KEY: self._key, ATTR_LOCK_MODE: mode.value},
        ):
            released = await self._run(operation, lambda: primitive(self._key))

        if released:
            logger.debug("Released advisory lock: key=%s, mode=%s", self._key, mode.value)
        else:
            logger.warning(
                "Released advisory lock that was not held: key=%s, mode=%s",
                self._key,
                mode.value,
            )

    async def _run(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        async with self._mutex:
            if self._closed:
                raise SessionClosedError(self._key, operation)
            try:
                return await call()
            except asyncio.CancelledError:
                # The connection withdrew the request. It only closes itself
                # when the outcome could not be determined.
                if self._connection.closed and not self._closed:
                    self._closed = True
                    logger.warning(
                        "Lock connection aborted after cancellation, session closed: "
                        "key=%s, operation=%s",
                        self._key,
                        operation,
                    )
                raise
            except Exception as e:
                # close() tore the connection down under this request
                if self._closed:
                    raise SessionClosedError(self._key, operation) from e
                raise

    async def _force_abort(self) -> None:
        try:
            await asyncio.shield(self._connection.abort())
        except Exception as e:
            logger.warning("Error aborting lock connection: key=%s, error=%s", self._key, e)


async def open_lock(
    backend: LockBackend,
    key: LockKey,
    *,
    timeout: float | None = None,
    tracer: Tracer | None = None,
    enable_tracing: bool = True,
) -> AdvisoryLock:
    """
    Open a lock session with a dedicated connection.

    The session holds the connection until it is closed: each open lock
    consumes one slot of the backend's connection pool. Size pools for the
    number of locks held concurrently.

    Args:
        backend: Connection source (e.g. PostgreSQLLockBackend)
        key: Signed 64-bit lock key
        timeout: Maximum seconds to wait for a free connection
        tracer: Optional custom Tracer instance
        enable_tracing: Whether to enable OpenTelemetry tracing.
            Ignored if tracer is explicitly provided.

    Returns:
        An open AdvisoryLock. The caller must close it, or use it as an
        async context manager.

    Raises:
        InvalidLockKeyError: If the key is not a signed 64-bit integer
        ConnectionUnavailableError: If no connection became available in time

    Example:
        >>> lock = await open_lock(backend, 42, timeout=5.0)
        >>> try:
        ...     await lock.lock()
        ...     await do_work()
        ... finally:
        ...     await lock.close()
    """
    key = validate_lock_key(key)
    tracer = tracer or create_tracer(__name__, enable_tracing)

    with tracer.span(
        "pglock.lock.open",
        {ATTR_LOCK_KEY: key, ATTR_LOCK_TIMEOUT: timeout if timeout is not None else -1},
    ):
        connection = await backend.connect(timeout=timeout)

    logger.debug("Opened lock session: key=%s", key)
    return AdvisoryLock(key, connection, tracer=tracer)


__all__ = [
    "AdvisoryLock",
    "Locker",
    "open_lock",
]
