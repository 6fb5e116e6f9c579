"""
Helpers for deriving advisory lock keys from names.

The lock session itself only deals in integers. Applications that identify
resources by name can use :func:`lock_key` to map names into the key space
deterministically, so that every process derives the same key.

Example:
    >>> from pglock import lock_key, open_lock
    >>> key = lock_key("reports:nightly")
    >>> lock = await open_lock(backend, key)
"""

from __future__ import annotations

import hashlib

from pglock.types import LockKey


def lock_key(name: str, namespace: str | None = None) -> LockKey:
    """
    Convert a string name to a signed 64-bit lock key.

    Uses the first 8 bytes of the SHA-256 digest, read as a signed big-endian
    integer, so the whole bigint range is used. Distinct names may still
    collide; keep names specific.

    Args:
        name: Resource name (e.g., "cutover:tenant-abc")
        namespace: Optional prefix, joined to the name with ":"

    Returns:
        Lock key in [-2**63, 2**63 - 1]

    Example:
        >>> lock_key("reports:nightly") == lock_key("nightly", namespace="reports")
        True
    """
    if namespace is not None:
        name = f"{namespace}:{name}"
    digest = hashlib.sha256(name.encode()).digest()
    return int.from_bytes(digest[:8], byteorder="big", signed=True)


__all__ = ["lock_key"]
