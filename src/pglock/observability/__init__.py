"""
Observability utilities for pglock.

Provides the tracer abstraction and standard span attributes used by lock
sessions and backends.

Note:
    OpenTelemetry is an optional dependency (``pip install pglock[telemetry]``).
    Everything in this module works without it.
"""

from pglock.observability.attributes import (
    ATTR_DB_OPERATION,
    ATTR_DB_SYSTEM,
    ATTR_LOCK_ACQUIRED,
    ATTR_LOCK_KEY,
    ATTR_LOCK_MODE,
    ATTR_LOCK_TIMEOUT,
)
from pglock.observability.tracer import (
    OTEL_AVAILABLE,
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    SpanKindEnum,
    Tracer,
    create_tracer,
)

__all__ = [
    "OTEL_AVAILABLE",
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    "SpanKindEnum",
    "create_tracer",
    "ATTR_LOCK_KEY",
    "ATTR_LOCK_MODE",
    "ATTR_LOCK_TIMEOUT",
    "ATTR_LOCK_ACQUIRED",
    "ATTR_DB_SYSTEM",
    "ATTR_DB_OPERATION",
]
