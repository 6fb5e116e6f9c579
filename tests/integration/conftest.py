"""
Shared pytest fixtures for integration tests.

This module provides a PostgreSQL container via testcontainers and lock
backends connected to it.

If testcontainers or Docker is not available, tests are automatically skipped.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Generator
from typing import Any

import pytest

from pglock import PostgreSQLLockBackend

# ============================================================================
# Testcontainers Detection
# ============================================================================

TESTCONTAINERS_AVAILABLE = False

try:
    from testcontainers.postgres import PostgresContainer

    TESTCONTAINERS_AVAILABLE = True
except ImportError:
    PostgresContainer = None  # type: ignore[assignment, misc]


def is_docker_available() -> bool:
    """Check if Docker is available for running containers."""
    import subprocess

    try:
        result = subprocess.run(
            ["docker", "info"],
            capture_output=True,
            timeout=5,
        )
        return result.returncode == 0
    except (subprocess.TimeoutExpired, OSError):
        return False


DOCKER_AVAILABLE = is_docker_available()


# ============================================================================
# Skip Conditions
# ============================================================================

skip_if_no_postgres_infra = pytest.mark.skipif(
    not (TESTCONTAINERS_AVAILABLE and DOCKER_AVAILABLE),
    reason="PostgreSQL test infrastructure not available",
)


# ============================================================================
# PostgreSQL Fixtures
# ============================================================================


@pytest.fixture(scope="session")
def postgres_container() -> Generator[Any, None, None]:
    """
    Provide PostgreSQL container for integration tests.

    Container is shared across all tests in the session.
    """
    if not TESTCONTAINERS_AVAILABLE or not DOCKER_AVAILABLE:
        pytest.skip("PostgreSQL testcontainer not available")

    container = PostgresContainer("postgres:15")
    container.start()

    yield container

    container.stop()


@pytest.fixture(scope="session")
def postgres_connection_url(postgres_container: Any) -> str:
    """Get PostgreSQL connection URL from container."""
    # testcontainers returns psycopg2 URL, convert to asyncpg
    url = postgres_container.get_connection_url()
    return url.replace("postgresql://", "postgresql+asyncpg://").replace("psycopg2", "asyncpg")


@pytest.fixture
async def pg_lock_backend(
    postgres_connection_url: str,
) -> AsyncGenerator[PostgreSQLLockBackend, None]:
    """
    Provide a PostgreSQL lock backend with its own engine.

    Engines are bound to an event loop, so each test gets a fresh one.
    """
    backend = PostgreSQLLockBackend.from_url(
        postgres_connection_url,
        pool_size=5,
        pool_timeout=5.0,
        enable_tracing=False,
    )

    yield backend

    await backend.dispose()


@pytest.fixture
async def small_pg_lock_backend(
    postgres_connection_url: str,
) -> AsyncGenerator[PostgreSQLLockBackend, None]:
    """Provide a PostgreSQL lock backend whose pool holds a single connection."""
    backend = PostgreSQLLockBackend.from_url(
        postgres_connection_url,
        pool_size=1,
        pool_timeout=0.5,
        enable_tracing=False,
    )

    yield backend

    await backend.dispose()
