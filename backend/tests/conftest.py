"""Pytest configuration and fixtures."""

import os

# must be set before transaction_api.db.session builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from transaction_api.api.v1.deps import get_idempotency_guard, get_listing_cache
from transaction_api.db import models  # noqa: F401
from transaction_api.db.base import Base
from transaction_api.db.repository import TransactionStore
from transaction_api.db.session import build_engine, get_db
from transaction_api.main import app
from transaction_api.services.idempotency import IdempotencyGuard
from transaction_api.services.listing_cache import ListingCache
from transaction_api.services.transactions import TransactionService


class FakeClock:
    """Manually advanced timer for TTL caches."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def guard() -> IdempotencyGuard:
    return IdempotencyGuard(ttl_seconds=1800, max_keys=1000)


@pytest.fixture
def listing_cache() -> ListingCache:
    return ListingCache(ttl_seconds=600, max_entries=500)


@pytest.fixture
def store(db_session) -> TransactionStore:
    return TransactionStore(db_session)


@pytest.fixture
def service(store, guard, listing_cache) -> TransactionService:
    return TransactionService(store, guard, listing_cache)


@pytest.fixture
def client(session_factory, guard, listing_cache):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_idempotency_guard] = lambda: guard
    app.dependency_overrides[get_listing_cache] = lambda: listing_cache
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def salary() -> dict:
    return {"description": "Salary", "amount": "100.00", "type": "INCOME"}
