# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Time-bounded cache for bearer tokens.

Tokens issued by the remote service are stored under a cache key and trusted
for a fixed time window counted from the moment they were written. Expired
entries are dropped lazily when read, or in bulk by ``cleanup_expired``.

None of the methods await, so each call is atomic with respect to other
coroutines running on the same event loop.

Example:
    Caching a token for one day::

        cache = TokenCache(ttl_seconds=86400)
        token = cache.get("https://alist.example.com#alist-secret")
        if token is None:
            token = cache.get_or_insert(key, lambda: issued_token)
"""

from __future__ import annotations

import time
from collections.abc import Callable

DEFAULT_TOKEN_TTL_SECONDS = 24 * 3600


class TokenCache:
    """In-memory token cache with expiry after write.

    Attributes:
        _ttl_seconds: Lifetime of an entry in seconds.
        _clock: Callable returning the current time in seconds.
        _entries: Mapping of cache key to (token, written_at).
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TOKEN_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the token cache.

        Args:
            ttl_seconds: Time-to-live for entries in seconds.
            clock: Time source, injectable for tests.
        """
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}

    def _is_expired(self, written_at: float) -> bool:
        return self._clock() - written_at >= self._ttl_seconds

    def get(self, key: str) -> str | None:
        """Return the live token stored under ``key``.

        Args:
            key: The token cache key.

        Returns:
            The token, or None if absent or expired.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        token, written_at = entry
        if self._is_expired(written_at):
            del self._entries[key]
            return None
        return token

    def get_or_insert(self, key: str, supplier: Callable[[], str]) -> str:
        """Return the live token for ``key``, storing ``supplier()`` on a miss.

        A live entry is never overwritten: when two logins race for the same
        key, the first token written wins and both callers receive it.

        Args:
            key: The token cache key.
            supplier: Called only when no live entry exists.

        Returns:
            The cached token.
        """
        token = self.get(key)
        if token is not None:
            return token

        token = supplier()
        self._entries[key] = (token, self._clock())
        return token

    def invalidate(self, key: str) -> None:
        """Remove the entry for ``key`` if present."""
        self._entries.pop(key, None)

    def cleanup_expired(self) -> int:
        """Remove all expired entries.

        Returns:
            Number of entries removed.
        """
        expired = [
            key for key, (_, written_at) in self._entries.items()
            if self._is_expired(written_at)
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        """Clear all entries from the cache."""
        self._entries.clear()

    @property
    def ttl_seconds(self) -> float:
        """Lifetime of an entry in seconds."""
        return self._ttl_seconds

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
