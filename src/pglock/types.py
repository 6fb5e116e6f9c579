"""Shared type definitions for pglock."""

from __future__ import annotations

from enum import Enum
from typing import TypeAlias

from pglock.exceptions import InvalidLockKeyError

LockKey: TypeAlias = int
"""Advisory lock identifier: a signed 64-bit integer (PostgreSQL bigint)."""

MIN_LOCK_KEY: LockKey = -(2**63)
MAX_LOCK_KEY: LockKey = 2**63 - 1


class LockMode(Enum):
    """
    Flavor of an advisory lock hold.

    Values:
        EXCLUSIVE: Conflicts with every hold of other sessions
        SHARED: Conflicts only with exclusive holds of other sessions
    """

    EXCLUSIVE = "exclusive"
    SHARED = "shared"


def validate_lock_key(key: object) -> LockKey:
    """
    Check that a key is an int in the signed 64-bit range.

    Args:
        key: Candidate lock key

    Returns:
        The key, unchanged

    Raises:
        InvalidLockKeyError: If the key is not an int or is out of range
    """
    # bool is an int subclass but never a sensible key
    if isinstance(key, bool) or not isinstance(key, int):
        raise InvalidLockKeyError(key)
    if not MIN_LOCK_KEY <= key <= MAX_LOCK_KEY:
        raise InvalidLockKeyError(key)
    return key


__all__ = [
    "LockKey",
    "LockMode",
    "MIN_LOCK_KEY",
    "MAX_LOCK_KEY",
    "validate_lock_key",
]
