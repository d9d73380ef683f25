"""Least-recently-used cache of rendered Typst snippets."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass

DEFAULT_CACHE_SIZE = 100


@dataclass(frozen=True)
class CacheEntry:
    output: str
    timestamp: float


class RenderCache:
    """Fixed-capacity LRU map from a content hash to rendered output.

    ``get`` on a hit makes the key most recently used; ``set`` on a full
    cache evicts the least recently used key first. Safe to share between
    threads. Keys are computed by the caller.
    """

    def __init__(self, max_size: int = DEFAULT_CACHE_SIZE) -> None:
        if max_size <= 0:
            raise ValueError("Cache size must be greater than 0")
        self.max_size = max_size
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            self._entries.move_to_end(key)
            return entry.output

    def set(self, key: str, output: str) -> None:
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self.max_size:
                self._entries.popitem(last=False)
            self._entries[key] = CacheEntry(output=output, timestamp=time.time())

    def entry(self, key: str) -> CacheEntry | None:
        """Peek at an entry without touching its recency."""
        with self._lock:
            return self._entries.get(key)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
