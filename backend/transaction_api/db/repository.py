# transaction_api/db/repository.py
"""SQLAlchemy-backed store for transaction rows.

The store is bound to one Session (one request). It commits on every write so
that each service call is its own unit of work; callers roll back through
``rollback`` when a write fails.
"""
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from transaction_api.db import models

# public sort names (camelCase, as exposed by the API) and their snake_case aliases
SORTABLE_COLUMNS: Dict[str, object] = {
    "id": models.Transaction.id,
    "description": models.Transaction.description,
    "amount": models.Transaction.amount,
    "type": models.Transaction.type,
    "createdAt": models.Transaction.created_at,
    "created_at": models.Transaction.created_at,
    "updatedAt": models.Transaction.updated_at,
    "updated_at": models.Transaction.updated_at,
}

SORT_DIRECTIONS = ("asc", "desc")


class TransactionStore:
    def __init__(self, db: Session):
        self.db = db

    def add(self, txn: models.Transaction) -> models.Transaction:
        self.db.add(txn)
        self.db.commit()
        self.db.refresh(txn)
        return txn

    def save(self, txn: models.Transaction) -> models.Transaction:
        """Commit changes made to a row already attached to this session."""
        self.db.commit()
        self.db.refresh(txn)
        return txn

    def get(self, txn_id: int) -> Optional[models.Transaction]:
        return self.db.get(models.Transaction, txn_id)

    def exists(self, txn_id: int) -> bool:
        stmt = select(models.Transaction.id).where(models.Transaction.id == txn_id)
        return self.db.execute(stmt).first() is not None

    def delete(self, txn_id: int) -> bool:
        txn = self.get(txn_id)
        if txn is None:
            return False
        self.db.delete(txn)
        self.db.commit()
        return True

    def count(self) -> int:
        return self.db.execute(select(func.count()).select_from(models.Transaction)).scalar_one()

    def list_page(
        self,
        page: int,
        size: int,
        sort_field: str = "id",
        sort_direction: str = "desc",
    ) -> Tuple[List[models.Transaction], int]:
        """
        Return (rows, total) for a zero-based page.
        Raises ValueError on an unknown sort field or direction.
        """
        column = SORTABLE_COLUMNS.get(sort_field)
        if column is None:
            raise ValueError(f"Unsupported sort field: {sort_field}")
        direction = sort_direction.lower()
        if direction not in SORT_DIRECTIONS:
            raise ValueError(f"Unsupported sort direction: {sort_direction}")

        order = column.desc() if direction == "desc" else column.asc()
        # id as tie-breaker keeps page boundaries stable for non-unique columns
        tie_breaker = models.Transaction.id.desc() if direction == "desc" else models.Transaction.id.asc()
        stmt = (
            select(models.Transaction)
            .order_by(order, tie_breaker)
            .offset(page * size)
            .limit(size)
        )
        rows = list(self.db.execute(stmt).scalars().all())
        return rows, self.count()

    def rollback(self) -> None:
        self.db.rollback()
