"""
pglock - Session-level advisory locks backed by PostgreSQL.

Processes on any number of machines coordinate access to a resource named by
a 64-bit key, with the lock state held by the database server instead of a
dedicated lock service.

Example:
    >>> from pglock import PostgreSQLLockBackend, lock_key, open_lock
    >>>
    >>> backend = PostgreSQLLockBackend.from_url("postgresql+asyncpg://localhost/app")
    >>>
    >>> async with await open_lock(backend, lock_key("reports:nightly")) as lock:
    ...     if await lock.try_lock():
    ...         await build_report()
    ...     else:
    ...         print("Another instance is building the report")
"""

from pglock.backends import (
    InMemoryLockBackend,
    InMemoryLockConnection,
    LockBackend,
    LockConnection,
    PostgreSQLLockBackend,
    PostgreSQLLockConnection,
)
from pglock.exceptions import (
    BackendIOError,
    ConnectionUnavailableError,
    InvalidLockKeyError,
    LockTimeoutError,
    PgLockError,
    SessionClosedError,
)
from pglock.keys import lock_key
from pglock.lock import AdvisoryLock, Locker, open_lock
from pglock.types import MAX_LOCK_KEY, MIN_LOCK_KEY, LockKey, LockMode, validate_lock_key

__version__ = "0.1.0"

__all__ = [
    # Lock sessions
    "AdvisoryLock",
    "Locker",
    "open_lock",
    # Types
    "LockKey",
    "LockMode",
    "MIN_LOCK_KEY",
    "MAX_LOCK_KEY",
    "validate_lock_key",
    "lock_key",
    # Backends
    "LockBackend",
    "LockConnection",
    "InMemoryLockBackend",
    "InMemoryLockConnection",
    "PostgreSQLLockBackend",
    "PostgreSQLLockConnection",
    # Exceptions
    "PgLockError",
    "InvalidLockKeyError",
    "ConnectionUnavailableError",
    "BackendIOError",
    "LockTimeoutError",
    "SessionClosedError",
]
