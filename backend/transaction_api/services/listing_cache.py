# transaction_api/services/listing_cache.py
"""Read-through cache for paginated listings.

Entries are keyed by (page, size, sort_field, sort_direction). A single write
can move a record across any number of pages, so every write clears the whole
cache instead of trying to find the affected pages.
"""
import functools
import logging
import threading
from typing import Hashable, Optional, Tuple

from cachetools import TTLCache

logger = logging.getLogger(__name__)

ListingKey = Tuple[int, int, str, str]


class ListingCache:
    def __init__(self, ttl_seconds: float = 600, max_entries: int = 500, timer=None):
        cache_kwargs = {"maxsize": max_entries, "ttl": ttl_seconds}
        if timer is not None:
            cache_kwargs["timer"] = timer
        # TTLCache evicts least recently used entries once maxsize is reached
        self._entries: TTLCache = TTLCache(**cache_kwargs)
        self._lock = threading.Lock()
        self._generation = 0

    @staticmethod
    def key(page: int, size: int, sort_field: str, sort_direction: str) -> ListingKey:
        return (page, size, sort_field, sort_direction.lower())

    def get(self, key: Hashable) -> Optional[object]:
        with self._lock:
            return self._entries.get(key)

    @property
    def generation(self) -> int:
        """Bumped by every invalidate_all; read it before querying the store."""
        with self._lock:
            return self._generation

    def put(self, key: Hashable, value: object, generation: Optional[int] = None) -> bool:
        """
        Store ``value`` unless the cache was invalidated after ``generation``
        was read. Returns False when the value was dropped as stale.
        """
        with self._lock:
            if generation is not None and generation != self._generation:
                return False
            self._entries[key] = value
            return True

    def invalidate_all(self) -> None:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self._generation += 1
        logger.debug("Listing cache cleared (%d entries)", count)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)


def invalidates_listing(method):
    """
    Decorator for service write methods: clear ``self.listing_cache`` once the
    wrapped call has returned. A raising call leaves the cache untouched.
    """
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        result = method(self, *args, **kwargs)
        self.listing_cache.invalidate_all()
        return result
    return wrapper
