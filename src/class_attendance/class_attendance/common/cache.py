"""Read-through cache keyed on (class_id, date).

Entries live until the caller invalidates them; nothing expires on its own.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from datetime import date
from typing import Callable, DefaultDict, Dict, Generic, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
CacheKey = Tuple[str, date]


class ReadThroughCache(Generic[T]):
    def __init__(self) -> None:
        self._entries: Dict[CacheKey, T] = {}
        # Bumped on every invalidation so a load racing it is not stored.
        self._generations: DefaultDict[CacheKey, int] = defaultdict(int)
        self._lock = threading.Lock()

    def get_or_load(self, class_id: str, work_date: date, loader: Callable[[], T]) -> T:
        key = (class_id, work_date)
        with self._lock:
            if key in self._entries:
                logger.debug("cache hit class=%s date=%s", class_id, work_date)
                return self._entries[key]
            generation = self._generations[key]

        logger.debug("cache miss class=%s date=%s", class_id, work_date)
        value = loader()
        with self._lock:
            if self._generations[key] == generation:
                self._entries[key] = value
        return value

    def invalidate(self, class_id: str, work_date: Optional[date] = None) -> None:
        """Drop one (class, date) entry, or every date of a class."""
        with self._lock:
            if work_date is not None:
                keys = [(class_id, work_date)]
            else:
                keys = [k for k in set(self._entries) | set(self._generations) if k[0] == class_id]
            for key in keys:
                self._entries.pop(key, None)
                self._generations[key] += 1

    def clear(self) -> None:
        with self._lock:
            for key in set(self._entries) | set(self._generations):
                self._generations[key] += 1
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
