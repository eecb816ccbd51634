# transaction_api/api/v1/deps.py
import re
from functools import lru_cache
from typing import Tuple

from fastapi import Depends, Query
from sqlalchemy.orm import Session

from transaction_api.core.config import settings
from transaction_api.core.exceptions import ValidationError
from transaction_api.db.repository import TransactionStore
from transaction_api.db.session import get_db
from transaction_api.services.idempotency import IdempotencyGuard
from transaction_api.services.listing_cache import ListingCache
from transaction_api.services.transactions import TransactionService

SORT_PATTERN = re.compile(r"^([a-zA-Z_]+),(asc|desc)$")


@lru_cache()
def get_idempotency_guard() -> IdempotencyGuard:
    """Process-wide guard (cached singleton)."""
    return IdempotencyGuard(
        ttl_seconds=settings.IDEMPOTENCY_TTL_SECONDS,
        max_keys=settings.IDEMPOTENCY_MAX_KEYS,
        release_on_failure=settings.IDEMPOTENCY_RELEASE_ON_FAILURE,
    )


@lru_cache()
def get_listing_cache() -> ListingCache:
    """Process-wide listing cache (cached singleton)."""
    return ListingCache(
        ttl_seconds=settings.LIST_CACHE_TTL_SECONDS,
        max_entries=settings.LIST_CACHE_MAX_ENTRIES,
    )


def get_transaction_service(
    db: Session = Depends(get_db),
    guard: IdempotencyGuard = Depends(get_idempotency_guard),
    listing_cache: ListingCache = Depends(get_listing_cache),
) -> TransactionService:
    return TransactionService(TransactionStore(db), guard, listing_cache)


def parse_sort(sort: str) -> Tuple[str, str]:
    """
    Parse a 'field,asc|desc' sort parameter.
    Raises ValidationError when the format does not match.
    """
    match = SORT_PATTERN.match(sort or "")
    if not match:
        raise ValidationError(
            details={"sort": "Invalid sort parameter format. Expected format: 'field,asc|desc'"}
        )
    return match.group(1), match.group(2)


def sort_params(
    sort: str = Query("id,desc", description="Sort field and direction (format: field,direction)"),
) -> Tuple[str, str]:
    return parse_sort(sort)
