"""
Module: backoffice_kernel.models.project
Responsibility: ORM persistence for projects, the root of every cascading
    delete.  Invoices, contracts and transactions reference a project by
    foreign key; documents reference it polymorphically.
Architecture position: Kernel > Models.  May import from db/base.py only.

Failure modes:
    - IntegrityError on duplicate code (uq_project_code).
    - IntegrityError on DELETE while any dependent row still references the
      project: foreign keys carry no ON DELETE CASCADE, dependents are
      removed by the cascade service first.
"""

from decimal import Decimal
from enum import Enum

from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from backoffice_kernel.db.base import TrackedBase


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    HOLD = "hold"
    CANCELLED = "cancelled"


class Project(TrackedBase):
    """A customer engagement that financial records are booked against."""

    __tablename__ = "projects"

    __table_args__ = (
        UniqueConstraint("code", name="uq_project_code"),
        Index("idx_project_status", "status"),
    )

    code: Mapped[str] = mapped_column(String(50), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ProjectStatus.ACTIVE.value,
    )

    agreement_currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        default="USD",
    )

    budget: Mapped[Decimal | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return f"<Project {self.code}: {self.name}>"
