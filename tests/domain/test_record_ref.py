"""
Tests for RecordRef and RecordKind.

RecordRef turns the polymorphic (related_type, related_id) pair that
documents carry into a value with a typed kind.
"""

from dataclasses import FrozenInstanceError

import pytest

from backoffice_kernel.domain.record_ref import RecordKind, RecordRef


class TestRecordKind:
    def test_values_double_as_related_type_tags(self):
        assert {k.value for k in RecordKind} == {
            "project", "invoice", "payment", "transaction", "contract", "document",
        }

    def test_plural_is_report_key(self):
        assert RecordKind.INVOICE.plural == "invoices"
        assert RecordKind.PROJECT.plural == "projects"


class TestRecordRef:
    def test_str_renders_kind_and_id(self):
        assert str(RecordRef.project("p-1")) == "project:p-1"

    def test_parse_round_trips(self):
        ref = RecordRef.parse("contract:c-9")
        assert ref == RecordRef.contract("c-9")

    def test_parse_keeps_colons_in_id(self):
        ref = RecordRef.parse("invoice:a:b")
        assert ref.kind is RecordKind.INVOICE
        assert ref.record_id == "a:b"

    @pytest.mark.parametrize("raw", ["project", "customer:1", ""])
    def test_parse_rejects_malformed(self, raw):
        with pytest.raises(ValueError, match="Invalid record ref"):
            RecordRef.parse(raw)

    def test_empty_id_rejected(self):
        with pytest.raises(ValueError, match="non-empty"):
            RecordRef(RecordKind.PROJECT, "")

    def test_kind_must_be_record_kind(self):
        with pytest.raises(ValueError, match="RecordKind"):
            RecordRef("project", "p-1")

    def test_immutable(self):
        ref = RecordRef.invoice("i-1")
        with pytest.raises(FrozenInstanceError):
            ref.record_id = "i-2"

    def test_from_tag(self):
        assert RecordRef.from_tag("project", "p-1") == RecordRef.project("p-1")

    @pytest.mark.parametrize("related_type,related_id", [
        (None, None),
        ("project", None),
        (None, "p-1"),
        ("", "p-1"),
    ])
    def test_from_tag_unset_pair_is_none(self, related_type, related_id):
        assert RecordRef.from_tag(related_type, related_id) is None

    def test_from_tag_foreign_kind_is_none(self):
        assert RecordRef.from_tag("personnel", "emp-1") is None

    def test_parse_unknown_kind_raises(self):
        with pytest.raises(ValueError, match="Invalid record ref"):
            RecordRef.parse("personnel:emp-1")
