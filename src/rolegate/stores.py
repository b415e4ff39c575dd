# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

"""Injectable key/value stores with explicit TTL eviction.

Collaborators that need short-lived counters (denial monitoring, and the
rate limiting that lives outside this package) receive a ``TTLStore`` at
construction time instead of sharing module-level dictionaries.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol


class TTLStore(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any, ttl_seconds: float) -> None: ...

    def incr(self, key: str, ttl_seconds: float) -> int: ...

    def delete(self, key: str) -> None: ...

    def evict_expired(self) -> int: ...


@dataclass
class _Entry:
    value: Any
    expires_at: float


class MemoryTTLStore:
    """Thread-safe in-process ``TTLStore``.

    Expired entries are invisible to readers but only removed by
    ``evict_expired()``, which the owner calls on its own schedule.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._live_entry(key)
            return entry.value if entry is not None else None

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        with self._lock:
            self._entries[key] = _Entry(value, self._clock() + ttl_seconds)

    def incr(self, key: str, ttl_seconds: float) -> int:
        """Increment a counter; the TTL starts when the counter is created."""
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                entry = _Entry(0, self._clock() + ttl_seconds)
                self._entries[key] = entry
            entry.value += 1
            return int(entry.value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def evict_expired(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if e.expires_at <= now]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _live_entry(self, key: str) -> _Entry | None:
        # caller holds the lock
        entry = self._entries.get(key)
        if entry is None or entry.expires_at <= self._clock():
            return None
        return entry
