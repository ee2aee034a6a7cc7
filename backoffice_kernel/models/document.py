"""
Module: backoffice_kernel.models.document
Responsibility: ORM persistence for uploaded document metadata.  A document
    attaches to a project, contract, invoice or personnel record through a
    polymorphic (related_type, related_id) pair with no foreign key.
Architecture position: Kernel > Models.  May import from db/base.py and the
    pure domain RecordRef value type.

Invariants enforced:
    - related_type and related_id are set together or not at all
      (ck_document_related_pair).
"""

from sqlalchemy import CheckConstraint, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from backoffice_kernel.db.base import ID_LENGTH, TrackedBase
from backoffice_kernel.domain.record_ref import RecordRef


class Document(TrackedBase):
    __tablename__ = "documents"

    __table_args__ = (
        CheckConstraint(
            "(related_type IS NULL) = (related_id IS NULL)",
            name="ck_document_related_pair",
        ),
        Index("idx_document_related", "related_type", "related_id"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    category: Mapped[str] = mapped_column(String(30), nullable=False, default="general")

    url: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    # Kind tag of the related record; RecordKind values, or "personnel"
    related_type: Mapped[str | None] = mapped_column(String(30), nullable=True)

    related_id: Mapped[str | None] = mapped_column(String(ID_LENGTH), nullable=True)

    @property
    def related_ref(self) -> RecordRef | None:
        """The related record as a tagged reference, if any."""
        return RecordRef.from_tag(self.related_type, self.related_id)

    @related_ref.setter
    def related_ref(self, ref: RecordRef | None) -> None:
        if ref is None:
            self.related_type = None
            self.related_id = None
        else:
            self.related_type = ref.kind.value
            self.related_id = ref.record_id
