"""
Module: backoffice_kernel.models.contract
Responsibility: ORM persistence for agreements signed under a project.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from decimal import Decimal
from enum import Enum

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from backoffice_kernel.db.base import ID_LENGTH, TrackedBase


class ContractStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class Contract(TrackedBase):
    __tablename__ = "contracts"

    __table_args__ = (
        Index("idx_contract_project", "project_id"),
    )

    code: Mapped[str] = mapped_column(String(50), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    project_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("projects.id", name="fk_contract_project"),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ContractStatus.DRAFT.value,
    )
