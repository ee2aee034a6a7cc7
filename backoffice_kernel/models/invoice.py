"""
Module: backoffice_kernel.models.invoice
Responsibility: ORM persistence for invoices issued against a project.
    An invoice owns zero or more payments; a payment never outlives it.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from decimal import Decimal
from enum import Enum

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from backoffice_kernel.db.base import ID_LENGTH, TrackedBase


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    ISSUED = "issued"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class Invoice(TrackedBase):
    """Invoice, optionally booked against a project."""

    __tablename__ = "invoices"

    __table_args__ = (
        Index("idx_invoice_project", "project_id"),
    )

    invoice_number: Mapped[str] = mapped_column(String(50), nullable=False)

    project_id: Mapped[str | None] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("projects.id", name="fk_invoice_project"),
        nullable=True,
    )

    total_amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=InvoiceStatus.DRAFT.value,
    )
