"""Keyed mutual exclusion for write paths."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class KeyedLock:
    """A family of asyncio locks addressed by string keys.

    Locks are created on first use and discarded once no task holds or waits
    for them. Multiple keys are always acquired in sorted order, so two
    callers asking for overlapping key sets cannot deadlock.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, *keys: str | None) -> AsyncIterator[None]:
        """Hold every given key for the duration of the block.

        ``None`` entries are ignored and duplicates are collapsed.

        Args:
            *keys: Keys to lock
        """
        ordered = sorted({key for key in keys if key is not None})
        acquired: list[str] = []
        try:
            for key in ordered:
                lock = self._checkout(key)
                try:
                    await lock.acquire()
                except BaseException:
                    self._checkin(key)
                    raise
                acquired.append(key)
            yield
        finally:
            for key in reversed(acquired):
                self._locks[key].release()
                self._checkin(key)

    def locked(self, key: str) -> bool:
        """Check whether a key is currently held."""
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)

    def _checkout(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        return lock

    def _checkin(self, key: str) -> None:
        self._users[key] -= 1
        if self._users[key] == 0:
            del self._users[key]
            del self._locks[key]


def user_name_key(user_name: str | None) -> str | None:
    """Lock key for a user name, case-insensitive."""
    return f"user_name:{user_name.strip().lower()}" if user_name else None


def email_key(email: str | None) -> str | None:
    """Lock key for an email address, case-insensitive."""
    return f"email:{email.strip().lower()}" if email else None


def user_auth_key(user_auth_id: int | None) -> str | None:
    """Lock key for a stored user auth record."""
    return f"user_auth:{user_auth_id}" if user_auth_id is not None else None


def provider_key(provider: str, user_id: str) -> str:
    """Lock key for an external provider identity."""
    return f"provider:{provider}:{user_id}"
