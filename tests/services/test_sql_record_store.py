"""
Tests for SqlRecordStore: kind-generic reads, batched deletes, error
translation and the unit of work.
"""

from unittest.mock import patch

import pytest
from sqlalchemy import event
from sqlalchemy.exc import IntegrityError, OperationalError

from backoffice_kernel.domain.record_ref import RecordKind
from backoffice_kernel.domain.record_store import RecordStore
from backoffice_kernel.exceptions import ConstraintViolationError, StoreUnavailableError
from backoffice_kernel.models import Invoice, Payment, Project
from backoffice_kernel.selectors.record_selector import RecordSelector, chunked
from backoffice_kernel.services.sql_record_store import SqlRecordStore, translate_store_errors


@pytest.fixture
def statements(session):
    """Record SQL statements executed on the test connection."""
    executed: list[str] = []
    conn = session.connection()

    def _capture(conn, cursor, statement, parameters, context, executemany):
        executed.append(statement)

    event.listen(conn, "before_cursor_execute", _capture)
    yield executed
    event.remove(conn, "before_cursor_execute", _capture)


class TestProtocol:
    def test_sql_store_satisfies_record_store(self, store):
        assert isinstance(store, RecordStore)


class TestChunked:
    def test_sorted_batches(self):
        assert list(chunked({"c", "a", "e", "b", "d"}, 2)) == [["a", "b"], ["c", "d"], ["e"]]

    def test_empty(self):
        assert list(chunked(set(), 10)) == []

    def test_batch_size_must_be_positive(self, session):
        with pytest.raises(ValueError, match="batch_size"):
            RecordSelector(session, batch_size=0)


class TestReads:
    def test_find_by_id_returns_name(self, store, records):
        project = records.project("Apollo")

        info = store.find_by_id(RecordKind.PROJECT, project.id)

        assert info.ref.record_id == project.id
        assert info.name == "Apollo"

    def test_find_by_id_kind_without_name(self, store, records):
        project = records.project()
        invoice = records.invoice(project)
        payment = records.payment(invoice)

        info = store.find_by_id(RecordKind.PAYMENT, payment.id, for_update=True)

        assert info.ref.kind is RecordKind.PAYMENT
        assert info.name is None

    def test_find_by_id_missing(self, store, db_tables):
        assert store.find_by_id(RecordKind.INVOICE, "missing") is None

    def test_find_ids_by_scalar_and_collection(self, store, records):
        a, b, c = records.project(), records.project(), records.project()
        ia = records.invoice(a)
        ib = records.invoice(b)
        records.invoice(c)

        assert store.find_ids(RecordKind.INVOICE, project_id=a.id) == {ia.id}
        assert store.find_ids(RecordKind.INVOICE, project_id={a.id, b.id}) == {ia.id, ib.id}

    def test_find_ids_none_matches_null(self, store, records):
        loose = records.invoice(None)
        booked = records.invoice(records.project())

        found = store.find_ids(RecordKind.INVOICE, project_id=None)

        assert loose.id in found
        assert booked.id not in found

    def test_find_ids_batches_collection(self, session, records, statements):
        project = records.project()
        invoices = [records.invoice(project) for _ in range(5)]
        store = SqlRecordStore(session, batch_size=2)
        statements.clear()

        found = store.find_ids(RecordKind.PAYMENT, invoice_id={i.id for i in invoices})

        assert found == set()
        selects = [s for s in statements if s.lstrip().upper().startswith("SELECT")]
        assert len(selects) == 3

    def test_find_ids_unknown_field(self, store, db_tables):
        with pytest.raises(ValueError, match="no field 'owner_id'"):
            store.find_ids(RecordKind.INVOICE, owner_id="x")

    def test_find_ids_two_collections_rejected(self, store, db_tables):
        with pytest.raises(ValueError, match="one collection criterion"):
            store.find_ids(RecordKind.DOCUMENT, related_id={"a"}, related_type={"project"})

    def test_find_referenced_ids_skips_null(self, store, records):
        project = records.project()
        invoice = records.invoice(project)
        tx = records.transaction()
        settled = records.payment(invoice, tx)
        unsettled = records.payment(invoice)

        found = store.find_referenced_ids(
            RecordKind.PAYMENT, "transaction_id", {settled.id, unsettled.id}
        )

        assert found == {tx.id}


class TestDeletes:
    def test_delete_many_counts_rows(self, store, records, count_rows):
        project = records.project()
        invoices = [records.invoice(project) for _ in range(3)]

        deleted = store.delete_many(RecordKind.INVOICE, {i.id for i in invoices})

        assert deleted == 3
        assert count_rows(Invoice, project_id=project.id) == 0

    def test_delete_many_ignores_missing_ids(self, store, records):
        project = records.project()
        invoice = records.invoice(project)

        assert store.delete_many(RecordKind.INVOICE, {invoice.id, "gone"}) == 1

    def test_delete_many_empty_is_noop(self, store, statements):
        statements.clear()
        assert store.delete_many(RecordKind.INVOICE, set()) == 0
        assert statements == []

    def test_delete_many_batches(self, session, records, statements):
        project = records.project()
        invoices = [records.invoice(project) for _ in range(5)]
        store = SqlRecordStore(session, batch_size=2)
        statements.clear()

        deleted = store.delete_many(RecordKind.INVOICE, [i.id for i in invoices])

        assert deleted == 5
        deletes = [s for s in statements if s.lstrip().upper().startswith("DELETE")]
        assert len(deletes) == 3

    def test_delete_single(self, store, records, count_rows):
        project = records.project()

        assert store.delete(RecordKind.PROJECT, project.id) == 1
        assert store.delete(RecordKind.PROJECT, project.id) == 0
        assert count_rows(Project, id=project.id) == 0

    def test_delete_referenced_row_is_constraint_violation(self, store, records):
        project = records.project()
        invoice = records.invoice(project)
        records.payment(invoice)

        with pytest.raises(ConstraintViolationError) as exc_info:
            store.run_in_transaction(
                lambda s: s.delete_many(RecordKind.INVOICE, {invoice.id})
            )

        assert exc_info.value.kind == "invoice"
        assert exc_info.value.operation == "delete_many"
        assert isinstance(exc_info.value.__cause__, IntegrityError)


class TestErrorTranslation:
    def test_operational_error_is_store_unavailable(self):
        with pytest.raises(StoreUnavailableError) as exc_info:
            with translate_store_errors(RecordKind.PAYMENT, "find_ids"):
                raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        err = exc_info.value
        assert err.retryable is True
        assert err.code == "STORE_UNAVAILABLE"
        assert err.kind == "payment"
        assert "OperationalError" in str(err)

    def test_integrity_error_is_constraint_violation(self):
        with pytest.raises(ConstraintViolationError) as exc_info:
            with translate_store_errors(None, "transaction"):
                raise IntegrityError("DELETE", {}, Exception("FOREIGN KEY constraint failed"))

        assert exc_info.value.retryable is False
        assert exc_info.value.kind is None

    def test_other_errors_pass_through(self):
        with pytest.raises(KeyError):
            with translate_store_errors(RecordKind.PROJECT, "find_by_id"):
                raise KeyError("x")

    def test_store_reads_translate(self, store, db_tables):
        with patch.object(
            RecordSelector, "find_ids",
            side_effect=OperationalError("SELECT", {}, Exception("connection reset")),
        ):
            with pytest.raises(StoreUnavailableError):
                store.find_ids(RecordKind.INVOICE, project_id="p")


class TestUnitOfWork:
    def test_commits_result(self, store, records, count_rows):
        project = records.project()

        result = store.run_in_transaction(
            lambda s: s.delete(RecordKind.PROJECT, project.id)
        )

        assert result == 1
        assert count_rows(Project, id=project.id) == 0

    def test_failure_rolls_back_everything_inside(self, store, records, count_rows):
        project = records.project()
        invoice = records.invoice(project)
        records.payment(invoice)

        def _work(s):
            s.delete_many(RecordKind.PAYMENT, s.find_ids(RecordKind.PAYMENT, invoice_id=invoice.id))
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            store.run_in_transaction(_work)

        assert count_rows(Payment, invoice_id=invoice.id) == 1

    def test_read_only_discards_changes(self, store, records, count_rows):
        project = records.project()

        result = store.run_in_transaction(
            lambda s: s.delete(RecordKind.PROJECT, project.id), read_only=True
        )

        assert result == 1
        assert count_rows(Project, id=project.id) == 1

    def test_starts_outer_transaction_on_fresh_session(self, session, db_tables):
        store = SqlRecordStore(session)
        assert not session.in_transaction()

        store.run_in_transaction(lambda s: s.find_by_id(RecordKind.PROJECT, "x"))

        assert not session.in_transaction()
