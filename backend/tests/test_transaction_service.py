"""Tests for TransactionService: validation, idempotency and cache invalidation."""

from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from transaction_api.core.exceptions import (
    DuplicateRequestError,
    IdempotencyRequiredError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from transaction_api.db.models import TransactionType
from transaction_api.schemas.transaction import TransactionCreate, TransactionUpdate
from transaction_api.db.repository import TransactionStore
from transaction_api.services.listing_cache import ListingCache
from transaction_api.services.transactions import MAX_PAGE, TransactionService


class TestCreate:
    def test_create_assigns_id_and_copies_fields(self, service, salary) -> None:
        created = service.create(salary, "k1")
        assert created.id is not None
        assert created.description == "Salary"
        assert created.amount == Decimal("100.00")
        assert created.type is TransactionType.INCOME
        assert created.created_at == created.updated_at

    def test_accepts_schema_instance(self, service) -> None:
        payload = TransactionCreate(description="Rent", amount=Decimal("950.00"), type="EXPENSE")
        created = service.create(payload, "k-rent")
        assert created.type is TransactionType.EXPENSE

    def test_reused_key_is_rejected_and_new_key_creates_second_record(self, service, salary) -> None:
        first = service.create(salary, "k1")
        with pytest.raises(DuplicateRequestError):
            service.create(salary, "k1")
        second = service.create(salary, "k2")
        assert second.id != first.id
        assert service.list().total_elements == 2

    @pytest.mark.parametrize("key", [None, "", "  "])
    def test_missing_key(self, service, salary, key) -> None:
        with pytest.raises(IdempotencyRequiredError):
            service.create(salary, key)

    @pytest.mark.parametrize(
        "payload, field",
        [
            ({"description": "Salary", "amount": "0", "type": "INCOME"}, "amount"),
            ({"description": "Salary", "amount": "-5.00", "type": "INCOME"}, "amount"),
            ({"description": "Salary", "type": "INCOME"}, "amount"),
            ({"description": "   ", "amount": "10.00", "type": "INCOME"}, "description"),
            ({"description": "x" * 256, "amount": "10.00", "type": "INCOME"}, "description"),
            ({"description": "Salary", "amount": "10.00"}, "type"),
            ({"description": "Salary", "amount": "10.00", "type": "REFUND"}, "type"),
        ],
    )
    def test_invalid_input(self, service, guard, payload, field) -> None:
        with pytest.raises(ValidationError) as exc_info:
            service.create(payload, "k-invalid")
        assert field in exc_info.value.details
        # rejected input does not consume the key
        assert not guard.is_consumed("k-invalid")

    def test_empty_payload(self, service) -> None:
        with pytest.raises(ValidationError):
            service.create(None, "k1")

    def test_store_failure_releases_key(self, service, guard, salary, monkeypatch) -> None:
        def broken_add(txn):
            raise SQLAlchemyError("disk full")

        monkeypatch.setattr(service.store, "add", broken_add)
        with pytest.raises(InternalError):
            service.create(salary, "k1")
        assert not guard.is_consumed("k1")

        monkeypatch.undo()
        assert service.create(salary, "k1").id is not None


class TestUpdate:
    def test_partial_update_preserves_description(self, service, salary) -> None:
        created = service.create(salary, "k1")
        updated = service.update(created.id, {"amount": "200.00", "type": "EXPENSE"})
        assert updated.description == "Salary"
        assert updated.amount == Decimal("200.00")
        assert updated.type is TransactionType.EXPENSE
        assert updated.created_at == created.created_at
        assert updated.updated_at >= created.updated_at

    def test_none_fields_are_ignored(self, service, salary) -> None:
        created = service.create(salary, "k1")
        updated = service.update(created.id, TransactionUpdate(description="Bonus"))
        assert updated.description == "Bonus"
        assert updated.amount == Decimal("100.00")
        assert updated.type is TransactionType.INCOME

    def test_missing_record(self, service) -> None:
        with pytest.raises(NotFoundError):
            service.update(999, {"amount": "1.00"})

    def test_rejects_non_positive_amount(self, service, salary) -> None:
        created = service.create(salary, "k1")
        with pytest.raises(ValidationError):
            service.update(created.id, {"amount": "0"})
        assert service.get(created.id).amount == Decimal("100.00")


class TestReadAndDelete:
    def test_get_by_id(self, service, salary) -> None:
        created = service.create(salary, "k1")
        assert service.get_by_id(created.id) == created
        assert service.get_by_id(12345) is None

    def test_delete_then_lookup_is_not_found(self, service, salary) -> None:
        created = service.create(salary, "k1")
        service.delete(created.id)
        assert service.get_by_id(created.id) is None
        with pytest.raises(NotFoundError):
            service.get(created.id)
        with pytest.raises(NotFoundError):
            service.delete(created.id)


class TestList:
    def test_empty_store(self, service) -> None:
        page = service.list(page=0, size=10)
        assert page.content == []
        assert page.total_elements == 0
        assert page.total_pages == 0

    def test_pagination_and_sort(self, service) -> None:
        for i, amount in enumerate(["30.00", "10.00", "20.00"]):
            service.create({"description": f"t{i}", "amount": amount, "type": "EXPENSE"}, f"k{i}")

        first = service.list(page=0, size=2, sort_field="amount", sort_direction="asc")
        assert [t.amount for t in first.content] == [Decimal("10.00"), Decimal("20.00")]
        assert first.total_elements == 3
        assert first.total_pages == 2

        second = service.list(page=1, size=2, sort_field="amount", sort_direction="asc")
        assert [t.amount for t in second.content] == [Decimal("30.00")]

    def test_default_sort_is_newest_id_first(self, service, salary) -> None:
        ids = [service.create(salary, f"k{i}").id for i in range(3)]
        assert [t.id for t in service.list().content] == sorted(ids, reverse=True)

    def test_result_is_cached(self, service, listing_cache) -> None:
        first = service.list(0, 10, "id", "desc")
        assert ListingCache.key(0, 10, "id", "desc") in listing_cache
        assert service.list(0, 10, "id", "desc") is first

    @pytest.mark.parametrize(
        "write",
        [
            lambda svc, txn_id: svc.create({"description": "New", "amount": "5.00", "type": "INCOME"}, "k-new"),
            lambda svc, txn_id: svc.update(txn_id, {"description": "Renamed"}),
            lambda svc, txn_id: svc.delete(txn_id),
        ],
        ids=["create", "update", "delete"],
    )
    def test_writes_invalidate_cached_pages(self, service, listing_cache, salary, write) -> None:
        txn_id = service.create(salary, "k1").id
        before = service.list(0, 10, "id", "desc")
        service.list(1, 10, "id", "desc")
        assert len(listing_cache) == 2

        write(service, txn_id)

        assert len(listing_cache) == 0
        after = service.list(0, 10, "id", "desc")
        assert after is not before
        assert after.content != before.content

    def test_write_during_listing_query_is_not_cached_stale(
        self, service, session_factory, guard, listing_cache, salary, monkeypatch
    ) -> None:
        other_session = session_factory()
        writer = TransactionService(TransactionStore(other_session), guard, listing_cache)
        read_page = service.store.list_page

        def read_then_concurrent_write(*args):
            result = read_page(*args)
            writer.create(salary, "k-concurrent")
            return result

        monkeypatch.setattr(service.store, "list_page", read_then_concurrent_write)
        assert service.list(0, 10, "id", "desc").total_elements == 0
        monkeypatch.undo()
        other_session.close()

        assert ListingCache.key(0, 10, "id", "desc") not in listing_cache
        assert service.list(0, 10, "id", "desc").total_elements == 1

    def test_failed_write_keeps_cache(self, service, listing_cache) -> None:
        service.list()
        with pytest.raises(NotFoundError):
            service.delete(42)
        assert len(listing_cache) == 1

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"page": -1},
            {"page": MAX_PAGE + 1},
            {"size": 0},
            {"sort_field": "password"},
            {"sort_direction": "sideways"},
        ],
    )
    def test_invalid_parameters(self, service, kwargs) -> None:
        with pytest.raises(ValidationError):
            service.list(**kwargs)
