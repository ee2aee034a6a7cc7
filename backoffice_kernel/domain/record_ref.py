"""
RecordRef - Self-describing pointer to any back-office record.

A record is identified by (kind, id).  Most references in the schema are
plain foreign keys whose target kind is fixed by the column, but Documents
attach to a project, contract or invoice through a polymorphic
``related_type`` + ``related_id`` pair.  RecordRef makes that pair a value:
the kind travels with the id, so code that walks the cascade graph can ask
for "all Documents whose related record is project:X" without relying on
string conventions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RecordKind(str, Enum):
    """
    Kinds of records held by the back-office store.

    The value doubles as the ``related_type`` tag stored on polymorphic
    references.
    """

    PROJECT = "project"
    INVOICE = "invoice"
    PAYMENT = "payment"
    TRANSACTION = "transaction"
    CONTRACT = "contract"
    DOCUMENT = "document"

    @property
    def plural(self) -> str:
        """Report key for this kind (``"invoices"``, ``"payments"``...)."""
        return f"{self.value}s"


@dataclass(frozen=True, slots=True)
class RecordRef:
    """
    Immutable reference to a record of a given kind.

    Format when rendered: ``"kind:id"``.
    """

    kind: RecordKind
    record_id: str

    def __post_init__(self) -> None:
        if not isinstance(self.kind, RecordKind):
            raise ValueError(f"kind must be RecordKind, got {type(self.kind)}")
        if not isinstance(self.record_id, str) or not self.record_id:
            raise ValueError(f"record_id must be a non-empty string, got {self.record_id!r}")

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.record_id}"

    @classmethod
    def parse(cls, ref_string: str) -> RecordRef:
        """
        Parse a string representation back to RecordRef.

        Format: "kind:id"
        """
        try:
            kind_str, record_id = ref_string.split(":", 1)
            return cls(kind=RecordKind(kind_str), record_id=record_id)
        except ValueError as e:
            raise ValueError(f"Invalid record ref string: {ref_string}") from e

    @classmethod
    def from_tag(cls, related_type: str | None, related_id: str | None) -> RecordRef | None:
        """
        Build a ref from a stored (type tag, id) pair.

        Returns None when either half is unset, or when the tag names a kind
        this store does not hold (documents may also be filed against
        personnel records, which live elsewhere).
        """
        if not related_type or not related_id:
            return None
        try:
            kind = RecordKind(related_type)
        except ValueError:
            return None
        return cls(kind=kind, record_id=related_id)

    # Convenience constructors

    @classmethod
    def project(cls, record_id: str) -> RecordRef:
        return cls(RecordKind.PROJECT, record_id)

    @classmethod
    def invoice(cls, record_id: str) -> RecordRef:
        return cls(RecordKind.INVOICE, record_id)

    @classmethod
    def contract(cls, record_id: str) -> RecordRef:
        return cls(RecordKind.CONTRACT, record_id)
