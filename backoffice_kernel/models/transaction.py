"""
Module: backoffice_kernel.models.transaction
Responsibility: ORM persistence for income/expense transactions.  A
    transaction may belong to a project directly, settle a payment, both,
    or neither.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from decimal import Decimal
from enum import Enum

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from backoffice_kernel.db.base import ID_LENGTH, TrackedBase


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class Transaction(TrackedBase):
    __tablename__ = "transactions"

    __table_args__ = (
        Index("idx_transaction_project", "project_id"),
    )

    project_id: Mapped[str | None] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("projects.id", name="fk_transaction_project"),
        nullable=True,
    )

    type: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=TransactionType.EXPENSE.value,
    )

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
