"""Library exceptions for the pglock package."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pglock.types import LockMode


class PgLockError(Exception):
    """Base exception for pglock library."""

    pass


class InvalidLockKeyError(PgLockError, ValueError):
    """Raised when a lock key does not fit in a signed 64-bit integer."""

    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(f"Lock key must be a signed 64-bit integer, got {key!r}")


class ConnectionUnavailableError(PgLockError):
    """
    Raised when no dedicated connection could be obtained in time.

    Every open lock holds one connection from the pool for its whole lifetime,
    so this usually means the pool is smaller than the number of locks the
    application keeps open concurrently. Retrying later is safe.

    Attributes:
        timeout: The timeout that elapsed, if one was given
    """

    def __init__(self, timeout: float | None = None, reason: str | None = None) -> None:
        self.timeout = timeout
        self.reason = reason
        message = "No database connection available for lock session"
        if timeout is not None:
            message += f" within {timeout}s"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class BackendIOError(PgLockError):
    """
    Raised when a lock primitive round trip fails.

    The driver error is chained as ``__cause__``. Nothing is retried.

    Attributes:
        operation: Name of the primitive that failed (e.g. "try_exclusive")
        key: The lock key the primitive was issued for
    """

    def __init__(self, operation: str, key: int | None, message: str) -> None:
        self.operation = operation
        self.key = key
        super().__init__(f"Lock backend error during {operation} (key={key}): {message}")


class LockTimeoutError(PgLockError, TimeoutError):
    """
    Raised when a blocking acquisition exceeds its deadline.

    The lock is guaranteed not to be held by the waiting session when this is
    raised, and the session remains usable.

    Attributes:
        key: The lock key that could not be acquired
        mode: Requested lock mode
        timeout: The deadline in seconds
    """

    def __init__(self, key: int, mode: LockMode, timeout: float) -> None:
        self.key = key
        self.mode = mode
        self.timeout = timeout
        super().__init__(
            f"Timed out after {timeout}s waiting for {mode.value} advisory lock (key={key})"
        )


class SessionClosedError(PgLockError):
    """
    Raised when an operation is attempted on a closed lock session.

    Attributes:
        key: The lock key of the closed session
        operation: The operation that was attempted
    """

    def __init__(self, key: int, operation: str) -> None:
        self.key = key
        self.operation = operation
        super().__init__(f"Cannot {operation}: lock session for key {key} is closed")


__all__ = [
    "PgLockError",
    "InvalidLockKeyError",
    "ConnectionUnavailableError",
    "BackendIOError",
    "LockTimeoutError",
    "SessionClosedError",
]
