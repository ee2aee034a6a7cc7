"""Record models for the back-office kernel."""

from backoffice_kernel.db.base import Base
from backoffice_kernel.domain.record_ref import RecordKind
from backoffice_kernel.models.contract import Contract, ContractStatus
from backoffice_kernel.models.document import Document
from backoffice_kernel.models.invoice import Invoice, InvoiceStatus
from backoffice_kernel.models.payment import Payment
from backoffice_kernel.models.project import Project, ProjectStatus
from backoffice_kernel.models.transaction import Transaction, TransactionType

MODEL_BY_KIND: dict[RecordKind, type[Base]] = {
    RecordKind.PROJECT: Project,
    RecordKind.INVOICE: Invoice,
    RecordKind.PAYMENT: Payment,
    RecordKind.TRANSACTION: Transaction,
    RecordKind.CONTRACT: Contract,
    RecordKind.DOCUMENT: Document,
}


def model_for(kind: RecordKind) -> type[Base]:
    """ORM class storing records of ``kind``."""
    return MODEL_BY_KIND[kind]


__all__ = [
    "MODEL_BY_KIND",
    "Contract",
    "ContractStatus",
    "Document",
    "Invoice",
    "InvoiceStatus",
    "Payment",
    "Project",
    "ProjectStatus",
    "Transaction",
    "TransactionType",
    "model_for",
]
