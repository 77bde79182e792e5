from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, Tuple, TypeVar

T = TypeVar("T")

_MISSING = object()


class TTLCache:
    """In-process get-or-compute cache with a fixed time-to-live.

    ``remember`` holds a per-key lock while computing, so concurrent cold
    misses for the same key run ``compute`` once and the others read the
    stored value. A ``compute`` that raises stores nothing. Per-key locks are
    dropped once no caller holds them, and every ``put`` evicts expired entries.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}
        # key -> (lock, number of callers holding or waiting on it)
        self._key_locks: Dict[str, Tuple[threading.Lock, int]] = {}
        self._lock = threading.Lock()

    def _lookup(self, key: str) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return _MISSING
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return _MISSING
            return value

    def _acquire_key(self, key: str) -> threading.Lock:
        with self._lock:
            lock, users = self._key_locks.get(key, (None, 0))
            if lock is None:
                lock = threading.Lock()
            self._key_locks[key] = (lock, users + 1)
            return lock

    def _release_key(self, key: str) -> None:
        with self._lock:
            lock, users = self._key_locks.get(key, (None, 0))
            if users <= 1:
                self._key_locks.pop(key, None)
            else:
                self._key_locks[key] = (lock, users - 1)

    def _sweep(self, now: float) -> None:
        expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]

    def get(self, key: str, default: Any = None) -> Any:
        value = self._lookup(key)
        return default if value is _MISSING else value

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            now = self._clock()
            self._sweep(now)
            self._entries[key] = (value, now + self.ttl_seconds)

    def remember(self, key: str, compute: Callable[[], T]) -> T:
        value = self._lookup(key)
        if value is not _MISSING:
            return value
        lock = self._acquire_key(key)
        try:
            with lock:
                value = self._lookup(key)
                if value is not _MISSING:
                    return value
                value = compute()
                self.put(key, value)
                return value
        finally:
            self._release_key(key)

    def forget(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
