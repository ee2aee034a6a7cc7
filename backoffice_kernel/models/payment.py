"""
Module: backoffice_kernel.models.payment
Responsibility: ORM persistence for payments against an invoice.  A payment
    may point at the transaction that records its settlement.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - invoice_id is NOT NULL: a payment always belongs to an invoice.
    - transaction_id is a plain foreign key with no ON DELETE action: the
      settlement transaction cannot be removed while the payment exists.
"""

from decimal import Decimal

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from backoffice_kernel.db.base import ID_LENGTH, TrackedBase


class Payment(TrackedBase):
    __tablename__ = "payments"

    __table_args__ = (
        Index("idx_payment_invoice", "invoice_id"),
        Index("idx_payment_transaction", "transaction_id"),
    )

    invoice_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("invoices.id", name="fk_payment_invoice"),
        nullable=False,
    )

    # Settlement transaction, if one has been recorded
    transaction_id: Mapped[str | None] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("transactions.id", name="fk_payment_transaction"),
        nullable=True,
    )

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="completed")
