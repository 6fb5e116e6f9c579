"""
Shared pytest fixtures for the pglock tests.

This module provides:
- Lock key fixtures (key, other_key)
- In-memory backend fixtures (backend, bounded_backend)
- Lock session fixtures (session_a, session_b, session_c) bound to the same key
- A MockTracer fixture for span assertions
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from uuid import uuid4

import pytest

from pglock import AdvisoryLock, InMemoryLockBackend, lock_key, open_lock
from pglock.observability import MockTracer

# =============================================================================
# Lock Key Fixtures
# =============================================================================


@pytest.fixture
def key() -> int:
    """Provide a fresh lock key so tests never share lock state."""
    return lock_key(f"test:{uuid4()}")


@pytest.fixture
def other_key() -> int:
    """Provide a second, unrelated lock key."""
    return lock_key(f"test:other:{uuid4()}")


# =============================================================================
# Backend Fixtures
# =============================================================================


@pytest.fixture
def backend() -> InMemoryLockBackend:
    """Provide an unbounded in-memory lock backend."""
    return InMemoryLockBackend()


@pytest.fixture
def bounded_backend() -> InMemoryLockBackend:
    """Provide an in-memory backend with room for two connections."""
    return InMemoryLockBackend(max_connections=2)


@pytest.fixture
def tracer() -> MockTracer:
    """Provide a tracer that records spans."""
    return MockTracer()


# =============================================================================
# Session Fixtures
# =============================================================================


@pytest.fixture
async def session_a(backend: InMemoryLockBackend, key: int) -> AsyncGenerator[AdvisoryLock, None]:
    """First lock session on ``key``."""
    lock = await open_lock(backend, key, enable_tracing=False)
    yield lock
    await lock.close()


@pytest.fixture
async def session_b(backend: InMemoryLockBackend, key: int) -> AsyncGenerator[AdvisoryLock, None]:
    """Second lock session on ``key``."""
    lock = await open_lock(backend, key, enable_tracing=False)
    yield lock
    await lock.close()


@pytest.fixture
async def session_c(backend: InMemoryLockBackend, key: int) -> AsyncGenerator[AdvisoryLock, None]:
    """Third lock session on ``key``."""
    lock = await open_lock(backend, key, enable_tracing=False)
    yield lock
    await lock.close()
