"""Unit tests for KeyedLock."""

import asyncio

import pytest

from authrepo.util.locks import KeyedLock, email_key, provider_key, user_name_key


class TestKeyedLock:
    """Tests for KeyedLock."""

    @pytest.mark.asyncio
    async def test_same_key_is_serialized(self):
        """Should let only one task into a key at a time."""
        locks = KeyedLock()
        inside = 0
        peak = 0

        async def worker():
            nonlocal inside, peak
            async with locks.hold("k"):
                inside += 1
                peak = max(peak, inside)
                await asyncio.sleep(0.01)
                inside -= 1

        await asyncio.gather(*(worker() for _ in range(5)))

        assert peak == 1

    @pytest.mark.asyncio
    async def test_different_keys_run_concurrently(self):
        """Should not block tasks holding unrelated keys."""
        locks = KeyedLock()
        entered = asyncio.Event()

        async def holder():
            async with locks.hold("a"):
                await asyncio.wait_for(entered.wait(), timeout=1)

        async def other():
            async with locks.hold("b"):
                entered.set()

        await asyncio.gather(holder(), other())

    @pytest.mark.asyncio
    async def test_overlapping_key_sets_do_not_deadlock(self):
        """Should acquire keys in sorted order whatever the argument order."""
        locks = KeyedLock()

        async def worker(*keys):
            async with locks.hold(*keys):
                await asyncio.sleep(0.01)

        await asyncio.wait_for(
            asyncio.gather(worker("x", "y"), worker("y", "x")), timeout=1
        )

    @pytest.mark.asyncio
    async def test_locks_are_released_and_discarded(self):
        """Should forget locks nobody holds, also after errors."""
        locks = KeyedLock()

        with pytest.raises(RuntimeError):
            async with locks.hold("k", None, "k"):
                assert locks.locked("k")
                raise RuntimeError("boom")

        assert not locks.locked("k")
        assert len(locks) == 0


class TestKeys:
    """Tests for lock key helpers."""

    def test_identity_keys_are_case_insensitive(self):
        assert user_name_key(" Alice ") == user_name_key("alice")
        assert email_key("A@X.io") == email_key("a@x.io")
        assert user_name_key(None) is None

    def test_provider_key(self):
        assert provider_key("google", "1") != provider_key("github", "1")
