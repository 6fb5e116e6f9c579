"""
Lock backends for pglock.

Backends own the lock state. pglock ships two:

- PostgreSQLLockBackend: PostgreSQL session-level advisory locks over a
  SQLAlchemy async engine
- InMemoryLockBackend: Same semantics inside one process, for tests and
  development
"""

from pglock.backends.in_memory import InMemoryLockBackend, InMemoryLockConnection
from pglock.backends.interface import LockBackend, LockConnection
from pglock.backends.postgresql import PostgreSQLLockBackend, PostgreSQLLockConnection

__all__ = [
    "LockBackend",
    "LockConnection",
    "InMemoryLockBackend",
    "InMemoryLockConnection",
    "PostgreSQLLockBackend",
    "PostgreSQLLockConnection",
]
