"""
Lock backend interface.

A lock backend is two things:

- a connection source (:class:`LockBackend`) that hands out dedicated,
  stateful connections, and
- the six advisory lock primitives (:class:`LockConnection`) issued over one
  such connection.

The backend owns all lock bookkeeping. Per connection and per key it keeps
separate stack counts for exclusive and shared holds, and ending the
connection releases every count unconditionally. Lock sessions only
orchestrate calls to these primitives.

Implementations:
- PostgreSQLLockBackend: PostgreSQL session-level advisory locks
- InMemoryLockBackend: In-process equivalent for tests and development
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pglock.types import LockKey


@runtime_checkable
class LockConnection(Protocol):
    """
    One dedicated backend session.

    A connection processes one request at a time. Callers must not issue
    concurrent requests on the same connection.

    Cancellation:
        When the calling task is cancelled during a primitive, the connection
        settles the request before returning. If it was not granted, the
        CancelledError propagates and nothing changed. If the grant had
        already happened, the primitive returns its normal result. If the
        outcome cannot be determined, the connection aborts itself (so
        ``closed`` becomes True) and the CancelledError propagates.
    """

    @property
    def closed(self) -> bool:
        """True once the connection has been closed or aborted."""
        ...

    async def try_exclusive(self, key: LockKey) -> bool:
        """
        Take an exclusive hold without waiting.

        Returns:
            True if acquired, False if another connection holds the key
            (exclusive or shared)
        """
        ...

    async def try_shared(self, key: LockKey) -> bool:
        """
        Take a shared hold without waiting.

        Returns:
            True if acquired, False if another connection holds the key
            exclusively
        """
        ...

    async def wait_exclusive(self, key: LockKey, timeout: float | None = None) -> None:
        """
        Take an exclusive hold, waiting as long as necessary.

        Args:
            key: Lock key
            timeout: Deadline in seconds (None = wait forever)

        Raises:
            LockTimeoutError: If the deadline passed first; nothing is held
        """
        ...

    async def wait_shared(self, key: LockKey, timeout: float | None = None) -> None:
        """
        Take a shared hold, waiting as long as necessary.

        Args:
            key: Lock key
            timeout: Deadline in seconds (None = wait forever)

        Raises:
            LockTimeoutError: If the deadline passed first; nothing is held
        """
        ...

    async def release_exclusive(self, key: LockKey) -> bool:
        """
        Drop one exclusive hold.

        Returns:
            False if this connection held no exclusive count on the key
        """
        ...

    async def release_shared(self, key: LockKey) -> bool:
        """
        Drop one shared hold.

        Returns:
            False if this connection held no shared count on the key
        """
        ...

    async def close(self) -> None:
        """End the session, releasing every hold it had."""
        ...

    async def abort(self) -> None:
        """
        End the session while a request may still be in flight on it.

        Used when the state of the connection is unknown, e.g. after an
        interrupted close(). Releases every hold, like close().
        """
        ...


@runtime_checkable
class LockBackend(Protocol):
    """Source of dedicated lock connections."""

    async def connect(self, *, timeout: float | None = None) -> LockConnection:
        """
        Obtain a dedicated connection.

        Args:
            timeout: Maximum seconds to wait for a free connection slot
                (None = the source's own limit)

        Returns:
            A connection owned exclusively by the caller until closed

        Raises:
            ConnectionUnavailableError: If no connection became available in time
        """
        ...


__all__ = [
    "LockBackend",
    "LockConnection",
]
