"""Tests for print preconditions and the report filename."""

from __future__ import annotations

import pytest

from pcr_app.core.errors import PdfPreconditionError
from pcr_app.schemas.pcr import PcrRecord
from pcr_app.services.pdfs.engine import ensure_printable, pcr_filename, validate_record_for_pdf


class TestValidateRecord:
    def test_complete_record_is_valid(self, record) -> None:
        assert validate_record_for_pdf(record) == []

    def test_every_missing_field_is_reported(self) -> None:
        errors = validate_record_for_pdf(PcrRecord())
        assert errors == [
            "Date is required",
            "Patient name is required",
            "Call number is required",
            "Report number is required",
        ]

    def test_whitespace_counts_as_missing(self, minimal_record) -> None:
        rec = minimal_record.model_copy(update={"patient_name": "   "})
        assert validate_record_for_pdf(rec) == ["Patient name is required"]

    def test_ensure_printable_raises_with_details(self) -> None:
        with pytest.raises(PdfPreconditionError) as exc_info:
            ensure_printable(PcrRecord(date="2026-03-14", patient_name="Jane Doe"))
        err = exc_info.value
        assert err.status_code == 422
        assert err.details == ["Call number is required", "Report number is required"]
        assert err.message.startswith("Please complete required fields:")


class TestPcrFilename:
    def test_format(self, record) -> None:
        assert pcr_filename(record) == "PCR_2026-03-14_C_1042_Jane_Doe.pdf"

    def test_every_non_alphanumeric_becomes_underscore(self) -> None:
        rec = PcrRecord(date="2026-03-14", call_number="A/7", patient_name="O'Brien, Mary-Kate")
        assert pcr_filename(rec) == "PCR_2026-03-14_A_7_O_Brien__Mary_Kate.pdf"

    def test_other_date_formats_are_normalised(self) -> None:
        rec = PcrRecord(date="03/14/2026", call_number="1", patient_name="X")
        assert pcr_filename(rec) == "PCR_2026-03-14_1_X.pdf"

    def test_unparsable_date_is_kept_sanitized(self) -> None:
        rec = PcrRecord(date="sometime in March", call_number="1", patient_name="X")
        assert pcr_filename(rec) == "PCR_sometime_in_March_1_X.pdf"

    def test_missing_parts_have_placeholders(self) -> None:
        assert pcr_filename(PcrRecord()) == "PCR_undated_unknown_patient.pdf"

    def test_depends_only_on_date_call_and_patient(self, record) -> None:
        other = record.model_copy(update={"location": "Gym", "report_number": "R-9", "comments": "different"})
        assert pcr_filename(other) == pcr_filename(record)
        assert pcr_filename(record) == pcr_filename(record)
