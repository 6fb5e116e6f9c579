"""
Unit tests for lock key types and the lock_key helper.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from pglock import MAX_LOCK_KEY, MIN_LOCK_KEY, LockMode, lock_key, validate_lock_key
from pglock.exceptions import InvalidLockKeyError


class TestValidateLockKey:
    """Tests for validate_lock_key()."""

    @pytest.mark.parametrize("key", [0, 1, -1, MIN_LOCK_KEY, MAX_LOCK_KEY])
    def test_accepts_signed_64_bit_values(self, key: int) -> None:
        assert validate_lock_key(key) == key

    @pytest.mark.parametrize("key", [MAX_LOCK_KEY + 1, MIN_LOCK_KEY - 1, 2**64])
    def test_rejects_out_of_range(self, key: int) -> None:
        with pytest.raises(InvalidLockKeyError):
            validate_lock_key(key)

    @pytest.mark.parametrize("key", ["42", 4.2, None, True])
    def test_rejects_non_integers(self, key: object) -> None:
        with pytest.raises(InvalidLockKeyError):
            validate_lock_key(key)


class TestLockMode:
    def test_values(self) -> None:
        assert LockMode.EXCLUSIVE.value == "exclusive"
        assert LockMode.SHARED.value == "shared"

    def test_is_closed_set(self) -> None:
        assert set(LockMode) == {LockMode.EXCLUSIVE, LockMode.SHARED}


class TestLockKey:
    """Tests for the lock_key() name hashing helper."""

    def test_deterministic_conversion(self) -> None:
        """The same name always produces the same key."""
        assert lock_key("reports:nightly") == lock_key("reports:nightly")

    def test_different_names_produce_different_keys(self) -> None:
        assert lock_key("migration:tenant-abc") != lock_key("migration:tenant-xyz")

    def test_namespace_is_joined_with_colon(self) -> None:
        assert lock_key("nightly", namespace="reports") == lock_key("reports:nightly")

    def test_keys_fit_signed_bigint(self) -> None:
        names = [
            "migration:tenant-abc",
            "lock:" + "a" * 1000,
            "",
            str(uuid4()),
            "tenant-éàü",
        ]
        for name in names:
            key = lock_key(name)
            assert MIN_LOCK_KEY <= key <= MAX_LOCK_KEY
            assert validate_lock_key(key) == key

    def test_uses_full_signed_range(self) -> None:
        """Keys are read as signed, so negative keys occur."""
        keys = [lock_key(f"name-{i}") for i in range(64)]
        assert any(key < 0 for key in keys)
        assert any(key > 0 for key in keys)
