# transaction_api/db/models.py
from sqlalchemy import Column, Integer, String, DateTime, Numeric, Enum
from .base import Base
import enum


class TransactionType(str, enum.Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class Transaction(Base):
    __tablename__ = "transactions"
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    description = Column(String(255), nullable=False)
    amount = Column(Numeric(19, 2), nullable=False)
    type = Column(Enum(TransactionType, native_enum=False, length=10), nullable=False)
    # timestamps are assigned by the service layer, not the database
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<Transaction id={self.id} type={self.type} amount={self.amount}>"
