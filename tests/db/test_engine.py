"""Tests for the engine module: session scope, dialect setup and schema."""

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import IntegrityError

from backoffice_kernel.db.engine import get_engine, is_postgres, session_scope
from backoffice_kernel.domain.record_ref import RecordRef
from backoffice_kernel.models import Document, Invoice, Payment, Project


class TestSchema:
    def test_all_tables_created(self, db_engine, db_tables):
        tables = set(inspect(db_engine).get_table_names())
        assert {"projects", "invoices", "payments", "transactions",
                "contracts", "documents"} <= tables

    def test_no_on_delete_cascade(self, db_engine, db_tables):
        for table in ("invoices", "payments", "transactions", "contracts"):
            for fk in inspect(db_engine).get_foreign_keys(table):
                assert not (fk.get("options") or {}).get("ondelete")

    def test_is_postgres_matches_dialect(self, db_engine):
        assert is_postgres() == (db_engine.dialect.name == "postgresql")
        assert get_engine() is db_engine


class TestConstraints:
    def test_foreign_keys_enforced(self, session):
        session.add(Payment(invoice_id="no-such-invoice", amount=1))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_document_related_pair_check(self, session):
        session.add(Document(name="half.pdf", related_type="project"))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_project_code_unique(self, session, records):
        records.project(code="DUP-1")
        with pytest.raises(IntegrityError):
            records.project(code="DUP-1")

    def test_sqlite_pragmas(self, session, db_engine):
        if db_engine.dialect.name != "sqlite":
            pytest.skip("SQLite only")
        assert session.execute(text("PRAGMA foreign_keys")).scalar() == 1


class TestDocumentRelatedRef:
    def test_round_trip(self, records):
        project = records.project()
        doc = records.document(RecordRef.project(project.id))

        assert doc.related_type == "project"
        assert doc.related_id == project.id
        assert doc.related_ref == RecordRef.project(project.id)

    def test_cleared(self, records):
        doc = records.document(None)
        assert doc.related_ref is None
        assert doc.related_type is None

    def test_personnel_document_has_no_ref(self, session):
        doc = Document(name="cv.pdf", related_type="personnel", related_id="emp-1")
        session.add(doc)
        session.flush()

        assert doc.related_ref is None
        assert doc.related_type == "personnel"


@pytest.mark.concurrency
class TestSessionScope:
    def test_commits_on_success(self, committed_session_factory):
        with session_scope() as s:
            s.add(Project(code="SCOPE-1", name="Scoped"))

        check = committed_session_factory()
        try:
            assert check.query(Project).filter_by(code="SCOPE-1").count() == 1
        finally:
            check.close()

    def test_rolls_back_on_error(self, committed_session_factory):
        with pytest.raises(RuntimeError):
            with session_scope() as s:
                s.add(Project(code="SCOPE-2", name="Scoped"))
                s.flush()
                raise RuntimeError("abort")

        check = committed_session_factory()
        try:
            assert check.query(Project).filter_by(code="SCOPE-2").count() == 0
        finally:
            check.close()

    def test_invoice_without_project_allowed(self, committed_session_factory):
        with session_scope() as s:
            s.add(Invoice(invoice_number="LOOSE-1"))

        check = committed_session_factory()
        try:
            assert check.query(Invoice).filter_by(project_id=None).count() == 1
        finally:
            check.close()
