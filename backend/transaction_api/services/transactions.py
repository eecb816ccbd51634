# transaction_api/services/transactions.py
"""Business logic for transactions.

The service is built per request around a TransactionStore (bound to that
request's Session) plus the process-wide IdempotencyGuard and ListingCache:

    service = TransactionService(TransactionStore(db), guard, listing_cache)

Writes commit through the store and then clear the listing cache. Store
failures are rolled back and surfaced as InternalError.
"""
import logging
import math
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

import pydantic
from sqlalchemy.exc import SQLAlchemyError

from transaction_api.core.exceptions import (
    IdempotencyRequiredError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from transaction_api.db import models
from transaction_api.db.repository import SORT_DIRECTIONS, SORTABLE_COLUMNS, TransactionStore
from transaction_api.schemas.transaction import (
    TransactionCreate,
    TransactionOut,
    TransactionPage,
    TransactionUpdate,
)
from transaction_api.services.idempotency import IdempotencyGuard
from transaction_api.services.listing_cache import ListingCache, invalidates_listing

logger = logging.getLogger(__name__)

# page numbers are 32-bit ints; keeps page * size inside the SQL integer range
MAX_PAGE = 2**31 - 1
# largest id SQLite can bind
MAX_ID = 2**63 - 1

CreateInput = Union[TransactionCreate, Mapping[str, Any]]
UpdateInput = Union[TransactionUpdate, Mapping[str, Any]]


def utcnow() -> datetime:
    # stored as naive UTC, matching the DateTime columns
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _validation_details(exc: pydantic.ValidationError) -> dict:
    details = {}
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "body"
        details.setdefault(field, err.get("msg", "Invalid value"))
    return details


def _coerce(schema, data):
    """Validate raw input against ``schema``; already-built schema objects pass through."""
    if data is None:
        raise ValidationError("Transaction parameters cannot be empty")
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except pydantic.ValidationError as exc:
        raise ValidationError(details=_validation_details(exc)) from exc


class TransactionService:
    def __init__(
        self,
        store: TransactionStore,
        idempotency_guard: IdempotencyGuard,
        listing_cache: ListingCache,
    ):
        self.store = store
        self.idempotency_guard = idempotency_guard
        self.listing_cache = listing_cache

    @invalidates_listing
    def create(self, data: CreateInput, idempotency_key: Optional[str]) -> TransactionOut:
        """
        Create a transaction at most once per idempotency key.
        Raises IdempotencyRequiredError, ValidationError, DuplicateRequestError
        or InternalError.
        """
        # a missing key is reported before anything else is looked at
        if idempotency_key is None or not idempotency_key.strip():
            raise IdempotencyRequiredError()
        payload = _coerce(TransactionCreate, data)

        with self.idempotency_guard.reserve(idempotency_key):
            now = utcnow()
            txn = models.Transaction(
                description=payload.description,
                amount=payload.amount,
                type=payload.type,
                created_at=now,
                updated_at=now,
            )
            saved = self._write(self.store.add, txn)
        logger.info("Transaction created: %s", saved.id)
        return TransactionOut.model_validate(saved)

    @invalidates_listing
    def update(self, txn_id: int, data: UpdateInput) -> TransactionOut:
        txn = self.store.get(txn_id)
        if txn is None:
            raise NotFoundError()
        changes = _coerce(TransactionUpdate, data)

        if changes.description is not None:
            txn.description = changes.description
        if changes.amount is not None:
            txn.amount = changes.amount
        if changes.type is not None:
            txn.type = changes.type
        txn.updated_at = utcnow()

        saved = self._write(self.store.save, txn)
        logger.info("Transaction updated: %s", txn_id)
        return TransactionOut.model_validate(saved)

    def get_by_id(self, txn_id: int) -> Optional[TransactionOut]:
        txn = self.store.get(txn_id)
        return TransactionOut.model_validate(txn) if txn is not None else None

    def get(self, txn_id: int) -> TransactionOut:
        found = self.get_by_id(txn_id)
        if found is None:
            raise NotFoundError()
        return found

    def list(
        self,
        page: int = 0,
        size: int = 10,
        sort_field: str = "id",
        sort_direction: str = "desc",
    ) -> TransactionPage:
        if page < 0:
            raise ValidationError(details={"page": "Page number must not be negative"})
        if page > MAX_PAGE:
            raise ValidationError(details={"page": f"Page number must not exceed {MAX_PAGE}"})
        if size < 1:
            raise ValidationError(details={"size": "Page size must be at least 1"})
        if sort_field not in SORTABLE_COLUMNS:
            raise ValidationError(details={"sort": f"Unsupported sort field: {sort_field}"})
        if sort_direction.lower() not in SORT_DIRECTIONS:
            raise ValidationError(details={"sort": f"Unsupported sort direction: {sort_direction}"})

        key = ListingCache.key(page, size, sort_field, sort_direction)
        cached = self.listing_cache.get(key)
        if cached is not None:
            logger.debug("Listing cache hit for %s", key)
            return cached

        logger.debug("Listing cache miss for %s", key)
        # a write landing between the query and the put must not leave this page cached
        generation = self.listing_cache.generation
        rows, total = self.store.list_page(page, size, sort_field, sort_direction)
        result = TransactionPage(
            content=[TransactionOut.model_validate(r) for r in rows],
            page=page,
            size=size,
            total_elements=total,
            total_pages=math.ceil(total / size) if total else 0,
            sort=f"{sort_field},{sort_direction.lower()}",
        )
        if not self.listing_cache.put(key, result, generation=generation):
            logger.debug("Dropped stale listing for %s", key)
        return result

    @invalidates_listing
    def delete(self, txn_id: int) -> None:
        if not self.store.exists(txn_id):
            raise NotFoundError()
        self._write(self.store.delete, txn_id)
        logger.info("Transaction deleted: %s", txn_id)

    def _write(self, operation, *args):
        try:
            return operation(*args)
        except SQLAlchemyError as exc:
            logger.exception("Transaction store write failed")
            self.store.rollback()
            raise InternalError() from exc
