"""Tests for individual report sections."""

from __future__ import annotations

import pytest

from pcr_app.schemas.pcr import PcrRecord
from pcr_app.services.pdfs import pcr_sections as sections
from pcr_app.services.pdfs.images import read_image


@pytest.fixture
def styles():
    return sections.ReportStyles.from_base(8)


def _texts(surface) -> list[str]:
    return [t.text for t in surface.trace]


class TestTransferFields:
    def test_paramedics_with_unit(self, record) -> None:
        fields, spans = sections.transfer_fields(record)
        assert spans == [2, 1, 1]
        assert fields[1] == ("Unit #:", "M-12")

    def test_police_badge(self) -> None:
        rec = PcrRecord(patient_care_transferred="Police", badge_number="4471")
        fields, spans = sections.transfer_fields(rec)
        assert spans == [2, 1, 1]
        assert fields[1] == ("Badge #:", "4471")

    def test_no_detail_falls_back_to_two_columns(self) -> None:
        fields, spans = sections.transfer_fields(PcrRecord(patient_care_transferred="Self"))
        assert spans == [3, 1]
        assert [label for label, _ in fields] == ["Patient Care Transferred To:", "Time Care Transferred:"]


class TestRenderNothing:
    def test_vitals_section_skipped_without_filled_rows(self, make_surface, styles) -> None:
        surface = make_surface()
        rec = PcrRecord.model_validate({"vitalSigns": [{"time": "", "pulse": ""}]})
        start = surface.y
        sections.add_vital_signs(surface, rec, styles)
        assert surface.y == start
        assert surface.trace == []

    def test_oxygen_section_skipped_without_protocol_or_readings(self, make_surface, styles) -> None:
        surface = make_surface()
        rec = PcrRecord.model_validate({"vitalSigns2": [{"time": "09:00", "spo2": ""}]})
        sections.add_oxygen_protocol(surface, rec, styles)
        assert "OXYGEN PROTOCOL" not in _texts(surface)

    def test_readings_alone_still_render(self, make_surface, styles) -> None:
        surface = make_surface()
        rec = PcrRecord.model_validate({"vitalSigns2": [{"time": "09:00", "spo2": 97}]})
        sections.add_oxygen_protocol(surface, rec, styles)
        texts = _texts(surface)
        assert "OXYGEN PROTOCOL" in texts
        assert "SpO2 Readings:" in texts
        assert "97" in texts

    def test_therapy_details_only_when_given(self, make_surface, styles) -> None:
        surface = make_surface()
        rec = PcrRecord.model_validate({"oxygenProtocol": {"oxygenGiven": "no", "deliveryDevice": "NRB"}})
        sections.add_oxygen_protocol(surface, rec, styles)
        texts = _texts(surface)
        assert "Oxygen Therapy Given?:" in texts
        assert "Delivery Device:" not in texts

    def test_pain_assessment_needs_content(self, make_surface, styles) -> None:
        surface = make_surface()
        sections.add_pain_assessment(surface, PcrRecord(), styles, None)
        assert surface.trace == []


class TestSections:
    def test_treatment_defaults_to_na(self, make_surface, styles) -> None:
        surface = make_surface()
        sections.add_treatment(surface, PcrRecord(), styles)
        assert _texts(surface).count("N/A") >= 7

    def test_tourniquet_details_follow_hemorrhage_control(self, make_surface, styles, record) -> None:
        surface = make_surface()
        sections.add_treatment(surface, record, styles)
        texts = _texts(surface)
        assert "09:10" in texts
        assert "3" in texts

    def test_pain_assessment_ends_below_taller_column(self, make_surface, styles, record, png_bytes) -> None:
        surface = make_surface()
        image = read_image(png_bytes)
        sections.add_pain_assessment(surface, record, styles, image)
        caption = next(t for t in surface.trace if t.text == "Pain Assessment:")
        col_w = (surface.geometry.content_width - sections.COLUMN_GAP) / 2
        image_bottom = caption.top + styles.body.line_height + 1 * 72 / 25.4 + col_w * 0.4
        assert surface.y >= image_bottom - 1e-6

    def test_opqrst_stays_in_left_column(self, make_surface, styles, record) -> None:
        surface = make_surface()
        sections.add_pain_assessment(surface, record, styles, None)
        g = surface.geometry
        col_w = (g.content_width - sections.COLUMN_GAP) / 2
        for t in surface.trace:
            assert t.x + t.width <= g.left + col_w + 1e-6

    def test_header_shows_generated_timestamp(self, make_surface, styles, options) -> None:
        surface = make_surface()
        sections.add_header(surface, styles, title="Patient Care Report", generated_at=options.generated_at)
        texts = _texts(surface)
        assert "Patient Care Report" in texts
        assert "Generated: 14-Mar-2026 09:26 AM" in texts

    def test_header_fits_large_type(self, make_surface, options) -> None:
        big = sections.ReportStyles.from_base(16)
        surface = make_surface()
        start = surface.y
        sections.add_header(surface, big, title="Patient Care Report " * 4, generated_at=options.generated_at)
        assert surface.y - start >= big.title.line_height - 1e-6
        for t in surface.trace:
            assert t.width <= t.max_width + 1e-6
            assert t.x + t.width <= surface.geometry.right + 1e-6


class TestFooter:
    def test_footer_pinned_to_bottom(self, make_surface, styles, record) -> None:
        surface = make_surface()
        strip_top = sections.add_signatures_and_footer(surface, record, styles)
        g = surface.geometry
        assert strip_top == pytest.approx(g.bottom_limit - sections.FOOTER_STRIP_HEIGHT)
        assert surface.page == 1
        assert sections.SIGNATURE_STATEMENT in _texts(surface)

    def test_footer_moves_to_new_page_when_content_reaches_strip(self, make_surface, styles, record) -> None:
        surface = make_surface()
        surface.move_to(surface.geometry.bottom_limit - sections.FOOTER_STRIP_HEIGHT)
        sections.add_signatures_and_footer(surface, record, styles)
        assert surface.page == 2
        assert all(t.page == 2 for t in surface.trace)

    def test_strip_grows_to_hold_large_type(self, make_surface, record) -> None:
        big = sections.ReportStyles.from_base(16)
        crew = record.model_copy(update={"responder3": "Christopher Montgomery-Williams"})
        surface = make_surface()
        strip_top = sections.add_signatures_and_footer(surface, crew, big)
        g = surface.geometry
        assert strip_top < g.bottom_limit - sections.FOOTER_STRIP_HEIGHT
        for t in surface.trace:
            assert t.top >= strip_top
            assert t.top + big.small.line_height <= g.bottom_limit + 1e-6
            assert t.width <= t.max_width + 1e-6

    def test_responders_line(self, record) -> None:
        assert sections.responders_line(record) == (
            "Supervisor: Sam Patel | Responder 1: Alex Kim | Responder 2: Jordan Lee"
        )
        assert sections.responders_line(PcrRecord()) == "Responders: Not Recorded"
