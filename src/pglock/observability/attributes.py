"""
Standard span attributes for pglock.

These follow OpenTelemetry semantic conventions where applicable.

Example:
    >>> from pglock.observability.attributes import ATTR_LOCK_KEY, ATTR_LOCK_MODE
    >>>
    >>> with tracer.span(
    ...     "pglock.lock.lock",
    ...     {ATTR_LOCK_KEY: 42, ATTR_LOCK_MODE: "exclusive"},
    ... ):
    ...     pass
"""

# =============================================================================
# Lock Attributes
# =============================================================================

ATTR_LOCK_KEY = "pglock.lock.key"
"""Numeric advisory lock key (integer)."""

ATTR_LOCK_MODE = "pglock.lock.mode"
"""Requested lock mode, "exclusive" or "shared" (string)."""

ATTR_LOCK_TIMEOUT = "pglock.lock.timeout"
"""Acquisition deadline in seconds, -1 when waiting forever (float)."""

ATTR_LOCK_ACQUIRED = "pglock.lock.acquired"
"""Whether a non-blocking acquisition succeeded (boolean)."""

# =============================================================================
# Database Attributes (OTEL semantic conventions)
# =============================================================================

ATTR_DB_SYSTEM = "db.system"
"""Database system identifier (e.g., 'postgresql')."""

ATTR_DB_OPERATION = "db.operation"
"""Database function being called (e.g., 'pg_advisory_lock')."""


__all__ = [
    "ATTR_LOCK_KEY",
    "ATTR_LOCK_MODE",
    "ATTR_LOCK_TIMEOUT",
    "ATTR_LOCK_ACQUIRED",
    "ATTR_DB_SYSTEM",
    "ATTR_DB_OPERATION",
]
