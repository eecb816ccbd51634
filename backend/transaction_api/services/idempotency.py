# transaction_api/services/idempotency.py
"""Idempotency guard for creation requests.

Consumed keys live in a bounded in-memory TTL cache (cachetools). The cache is
per process, so the guard is only correct for a single-instance deployment.

Keys are reserved *before* the guarded operation runs so that two concurrent
requests carrying the same fresh key cannot both get through. ``reserve``
hands the key back when the operation raises (unless configured otherwise),
which lets a client retry after a failed attempt.
"""
import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from cachetools import TTLCache

from transaction_api.core.exceptions import DuplicateRequestError, IdempotencyRequiredError

logger = logging.getLogger(__name__)

PROCESSED = "PROCESSED"


class IdempotencyGuard:
    def __init__(
        self,
        ttl_seconds: float = 1800,
        max_keys: int = 1000,
        release_on_failure: bool = True,
        timer=None,
    ):
        cache_kwargs = {"maxsize": max_keys, "ttl": ttl_seconds}
        if timer is not None:
            cache_kwargs["timer"] = timer
        self._keys: TTLCache = TTLCache(**cache_kwargs)
        self._lock = threading.Lock()
        self.release_on_failure = release_on_failure

    def check(self, key: Optional[str]) -> None:
        """
        Mark ``key`` as consumed.
        Raises IdempotencyRequiredError for a missing/blank key and
        DuplicateRequestError when the key is already consumed.
        """
        if key is None or not key.strip():
            raise IdempotencyRequiredError()
        with self._lock:
            # lookup and insert under one lock: insert-if-absent
            if key in self._keys:
                logger.warning("Duplicate request for idempotency key %s", key)
                raise DuplicateRequestError()
            self._keys[key] = PROCESSED

    def release(self, key: str) -> None:
        with self._lock:
            self._keys.pop(key, None)

    def is_consumed(self, key: str) -> bool:
        with self._lock:
            return key in self._keys

    def clear(self) -> None:
        with self._lock:
            self._keys.clear()

    def __len__(self) -> int:
        with self._lock:
            self._keys.expire()
            return len(self._keys)

    @contextmanager
    def reserve(self, key: Optional[str]) -> Iterator[str]:
        """
        Wrap an operation with the idempotency check:

            with guard.reserve(key):
                do_the_write()
        """
        self.check(key)
        try:
            yield key
        except Exception:
            if self.release_on_failure:
                logger.info("Releasing idempotency key %s after failed operation", key)
                self.release(key)
            raise
