"""Per-category cache for mapped external posts."""

import threading
import time
from typing import Callable, Optional

from schemas import PostResponse


class CategoryCache:
    """Whole-entry cache keyed by category with a fixed freshness window.

    Entries are replaced wholesale on put and dropped on expiry or explicit
    invalidation; nothing is ever partially updated.
    """

    def __init__(self, ttl: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, tuple[float, list[PostResponse]]] = {}
        self._lock = threading.Lock()

    def get(self, category: str) -> Optional[list[PostResponse]]:
        key = category.lower()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, posts = entry
            if self._clock() - stored_at >= self.ttl:
                del self._entries[key]
                return None
            return list(posts)

    def put(self, category: str, posts: list[PostResponse]) -> None:
        with self._lock:
            self._entries[category.lower()] = (self._clock(), list(posts))

    def invalidate(self, category: Optional[str] = None) -> None:
        with self._lock:
            if category is None:
                self._entries.clear()
            else:
                self._entries.pop(category.lower(), None)

    def __contains__(self, category: str) -> bool:
        return self.get(category) is not None
