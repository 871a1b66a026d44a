# FILE: pcr_app/services/pdfs/pcr_sections.py
"""
Patient Care Report sections, drawn top to bottom in a fixed order.

Each renderer reads the record, decides what (if anything) to show, and
lays it out with the shared primitives against the surface cursor.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from reportlab.lib.utils import ImageReader

from pcr_app.schemas.pcr import OxygenProtocol, PcrRecord, Spo2Reading
from pcr_app.services.pdfs.images import DIAGRAM_ASPECT, draw_image, image_scale, img_reader
from pcr_app.services.pdfs.primitives import banner, caption, fields_row, multiline_block, rule
from pcr_app.services.pdfs.surface import DrawingSurface, mm_pt
from pcr_app.services.pdfs.tables import TableSpec, draw_row_table, draw_transposed_table
from pcr_app.services.pdfs.text import TextStyle, fit_text, wrap_text
from pcr_app.utils.text import is_blank, join_filled
from pcr_app.utils.timezone import fmt_generated

NA = "N/A"
NOT_RECORDED = "Not Recorded"

HEADER_HEIGHT = mm_pt(8)
LOGO_SIZE = mm_pt(8)
COLUMN_GAP = mm_pt(8)
FOOTER_STRIP_HEIGHT = mm_pt(18)
FOOTER_CLEARANCE = mm_pt(4)

VITAL_SIGN_HEADERS = ("Time", "Pulse", "Resp", "B/P", "LOC,GCS", "Skin,Temp", "Pupils")
SIGNATURE_STATEMENT = "This statement serves as a replacement for signatures on this Patient Care Report."


@dataclass(frozen=True)
class ReportStyles:
    body: TextStyle
    banner: TextStyle
    title: TextStyle
    small: TextStyle

    @classmethod
    def from_base(cls, size: float, family: str = "Helvetica") -> "ReportStyles":
        body = TextStyle(family=family, size=size)
        return cls(
            body=body,
            banner=body.sized(size + 1).strong(),
            title=body.sized(size + 4).strong(),
            small=body.sized(max(size - 1, 4)),
        )


def _or(value: Optional[str], default: str) -> str:
    return default if is_blank(value) else str(value)


# -----------------------------
# Header
# -----------------------------
def add_header(surface: DrawingSurface, styles: ReportStyles, *, title: str,
               generated_at: datetime, logo_path: Optional[str] = None) -> None:
    g = surface.geometry
    height = max(HEADER_HEIGHT, styles.title.line_height)
    top = surface.claim(height)
    x = g.left
    logo = img_reader(logo_path)
    if logo:
        surface.image(logo, x, top, LOGO_SIZE, LOGO_SIZE)
        x += LOGO_SIZE + mm_pt(3)

    stamp = f"Generated: {fmt_generated(generated_at)}"
    stamp_w = styles.small.width(stamp)
    surface.text(g.right, top, stamp, styles.small, align="right", max_width=g.content_width)
    title_top = top + (height - styles.title.line_height) / 2
    title_w = max(0.0, g.right - x - stamp_w - mm_pt(3))
    surface.text(x, title_top, fit_text(title, title_w, styles.title), styles.title, max_width=title_w)


# -----------------------------
# Response / patient information
# -----------------------------
def add_basic_information(surface: DrawingSurface, r: PcrRecord, styles: ReportStyles) -> None:
    body = styles.body
    banner(surface, "RESPONSE AND PATIENT INFORMATION", styles.banner, keep_with=body.line_height)

    fields_row(surface, [
        ("Date:", r.date),
        ("Location:", r.location),
        ("Call #:", r.call_number),
        ("Report #:", r.report_number),
    ], [1, 1, 1, 1], body)
    fields_row(surface, [
        ("Supervisor:", r.supervisor),
        ("Primary PSM:", r.primary_psm),
        ("Responders:", r.responders_text()),
    ], [1, 1, 2], body)
    fields_row(surface, [
        ("Time Notified:", r.time_notified),
        ("On Scene:", r.on_scene),
        ("Transport Arrived:", _or(r.transport_arrived, NA)),
        ("Cleared:", r.cleared_scene),
    ], [1, 1, 1, 1], body)
    fields_row(surface, [
        ("Paramedics Called by:", _or(r.paramedics_called_by, NA)),
        ("First Agency on Scene:", r.first_agency_on_scene),
    ], [2, 2], body)

    rule(surface, gap=mm_pt(4))


def add_patient_information(surface: DrawingSurface, r: PcrRecord, styles: ReportStyles) -> None:
    body = styles.body
    surface.skip(mm_pt(2))

    fields_row(surface, [
        ("Patient Name:", r.patient_name),
        ("DOB:", _or(r.dob, NOT_RECORDED)),
        ("Age:", _or(r.age, NOT_RECORDED)),
        ("Sex:", r.sex_text()),
    ], [1, 1, 1, 1], body)
    fields_row(surface, [
        ("Status:", r.status_text()),
        ("Student/Employee #:", _or(r.student_employee_number, NOT_RECORDED)),
        ("Emergency Contact Name (Relationship):", r.emergency_contact_name),
    ], [1, 1, 2], body)
    fields_row(surface, [
        ("Contacted?:", r.contacted),
        ("Contact Phone:", r.emergency_contact_phone),
        ("Contacted by:", r.contacted_by),
        ("Workplace Injury?:", r.workplace_injury),
    ], [1, 1, 1, 1], body)


# -----------------------------
# Medical history
# -----------------------------
def add_medical_history(surface: DrawingSurface, r: PcrRecord, styles: ReportStyles) -> None:
    body = styles.body
    banner(surface, "PATIENT MEDICAL HISTORY / REASON FOR RESPONSE", styles.banner, keep_with=body.line_height)

    for label, value in (
        ("Chief Complaint:", r.chief_complaint),
        ("Signs & Symptoms:", r.signs_symptoms),
        ("Allergies:", r.allergies),
        ("Medications:", r.medications),
        ("Pertinent Medical History:", r.medical_history),
        ("Last Meal:", r.last_meal),
    ):
        multiline_block(surface, label, value, body)

    rule(surface)
    multiline_block(surface, "Rapid Body Survey Findings:", r.body_survey, body)


# -----------------------------
# Treatment performed
# -----------------------------
def add_treatment(surface: DrawingSurface, r: PcrRecord, styles: ReportStyles) -> None:
    body = styles.body
    banner(surface, "TREATMENT PERFORMED / PHYSICAL FINDINGS", styles.banner, keep_with=body.line_height)

    fields_row(surface, [("Airway Management:", _or(r.airway_text(), NA))], [4], body)
    fields_row(surface, [
        ("CPR Time Started:", _or(r.time_started, NA)),
        ("CPR Number of Cycles:", _or(r.number_of_cycles, NA)),
    ], [2, 2], body)
    fields_row(surface, [
        ("AED Number of Shocks:", _or(r.number_of_shocks, NA)),
        ("Shock Not Advised:", _or(r.shock_not_advised, NA)),
    ], [2, 2], body)

    tourniquet = r.has_tourniquet
    fields_row(surface, [
        ("Hemorrhage Control:", _or(join_filled(r.hemorrhage_control), NA)),
        ("Tourniquet Time:", (r.time_applied or "") if tourniquet else NA),
        ("Turns:", (r.number_of_turns or "") if tourniquet else NA),
    ], [2, 1, 1], body)
    fields_row(surface, [
        ("Immobilization:", _or(join_filled(r.immobilization), NA)),
        ("Patient Position:", r.position_of_patient),
    ], [2, 2], body)


# -----------------------------
# Pain assessment + injury diagram
# -----------------------------
def has_pain_assessment(r: PcrRecord) -> bool:
    opqrst = (r.onset, r.provocation, r.quality, r.radiation, r.scale, r.time)
    return bool(r.injury_canvas) or any(not is_blank(v) for v in opqrst)


def add_pain_assessment(surface: DrawingSurface, r: PcrRecord, styles: ReportStyles,
                        diagram: Optional[ImageReader]) -> None:
    """
    Two columns: OPQRST on the left, the injury diagram on the right.

    The cursor ends below the taller of the two columns. A missing or
    undecodable diagram leaves the right column blank.
    """
    if not has_pain_assessment(r):
        return
    body = styles.body
    g = surface.geometry

    col_w = (g.content_width - COLUMN_GAP) / 2
    img_h = 0.0
    if diagram is not None:
        nw, nh = diagram.getSize()
        img_h = nh * image_scale(nw, nh, col_w, DIAGRAM_ASPECT) if nw and nh else 0.0

    rule(surface)
    surface.ensure(body.line_height + mm_pt(1) + max(img_h, body.line_height))
    caption(surface, "Pain Assessment:", body)

    start_y, start_page = surface.y, surface.page
    if diagram is not None:
        draw_image(surface, diagram, g.left + col_w + COLUMN_GAP, start_y, col_w, aspect=DIAGRAM_ASPECT)

    for label, value in (
        ("Onset:", r.onset),
        ("Provocation:", r.provocation),
        ("Quality:", r.quality),
        ("Radiation:", r.radiation),
    ):
        multiline_block(surface, label, value, body, width=col_w)
    fields_row(surface, [("Scale:", r.scale)], [4], body, width=col_w)
    fields_row(surface, [("Time:", r.time)], [4], body, width=col_w)

    if surface.page == start_page:
        surface.move_to(start_y + img_h)
    surface.skip(mm_pt(5))


# -----------------------------
# Vital signs
# -----------------------------
def add_vital_signs(surface: DrawingSurface, r: PcrRecord, styles: ReportStyles) -> None:
    vitals = r.filled_vital_signs()
    if not vitals:
        return
    spec = TableSpec.build("VITAL SIGNS", VITAL_SIGN_HEADERS, [v.cells() for v in vitals])
    draw_row_table(surface, spec, styles.body, banner_style=styles.banner)
    surface.skip(mm_pt(4))


# -----------------------------
# Oxygen protocol
# -----------------------------
def _o2_team(o2: OxygenProtocol) -> str:
    names = [
        f"Supervisor: {o2.o2_supervisor}" if o2.o2_supervisor else "",
        f"Responder 1: {o2.o2_responder1}" if o2.o2_responder1 else "",
        f"Responder 2: {o2.o2_responder2}" if o2.o2_responder2 else "",
        f"Responder 3: {o2.o2_responder3}" if o2.o2_responder3 else "",
    ]
    return join_filled(names, sep=" | ")


def _therapy_rows(surface: DrawingSurface, o2: OxygenProtocol, styles: ReportStyles) -> None:
    body = styles.body
    fields_row(surface, [
        ("Oxygen Therapy Given?:", o2.oxygen_given),
        ("Who Started Therapy:", _or(o2.who_started_therapy, NA)),
    ], [2, 2], body)
    if not o2.therapy_given:
        return

    team = _o2_team(o2)
    if team:
        fields_row(surface, [("O2 Team:", team)], [4], body)

    reasons = o2.reasons_text()
    if reasons:
        fields_row(surface, [("Reason for O2 Therapy:", reasons)], [4], body)

    if o2.time_therapy_started or o2.time_therapy_ended:
        fields_row(surface, [
            ("Time Therapy Started:", o2.time_therapy_started),
            ("Time Therapy Ended:", o2.time_therapy_ended),
        ], [2, 2], body)

    if o2.flow_rate is not None or o2.delivery_device:
        fields_row(surface, [
            ("Delivery Device:", o2.delivery_device),
            ("Initial Flow Rate (L/min):", o2.flow_rate),
        ], [2, 2], body)

    alterations = o2.filled_alterations()
    if alterations:
        surface.skip(mm_pt(3))
        caption(surface, "Flow Rate Alterations:", body)
        spec = TableSpec.build(
            "Flow Rate Alterations",
            ("Time of Change", "Flow Rate (L/min)"),
            [(a.time, a.flow_rate) for a in alterations],
            orientation="transposed",
        )
        draw_transposed_table(surface, spec, body)
        surface.skip(mm_pt(6))


def add_oxygen_protocol(surface: DrawingSurface, r: PcrRecord, styles: ReportStyles) -> None:
    o2 = r.oxygen_protocol
    readings: List[Spo2Reading] = r.filled_spo2_readings()
    if o2 is None and not readings:
        return
    body = styles.body
    banner(surface, "OXYGEN PROTOCOL", styles.banner, keep_with=body.line_height)

    if o2 is not None:
        if o2.has_saturation:
            fields_row(surface, [
                ("Saturation Target Range:", o2.saturation_range),
                ("Initial SpO2 %:", o2.spo2),
                ("Initial SpO2 Acceptable:", o2.spo2_acceptable),
            ], [2, 1, 1], body)
        if o2.oxygen_given:
            _therapy_rows(surface, o2, styles)
            if o2.reason_for_ending_therapy:
                multiline_block(surface, "Reason for Ending Therapy:", o2.reason_for_ending_therapy, body)

    if readings:
        rule(surface)
        caption(surface, "SpO2 Readings:", body)
        spec = TableSpec.build(
            "SpO2 Readings",
            ("Time", "SpO2 (%)"),
            [(v.time, v.spo2) for v in readings],
            orientation="transposed",
        )
        draw_transposed_table(surface, spec, body)
    surface.skip(mm_pt(4))


# -----------------------------
# Call description / transfer
# -----------------------------
def transfer_fields(r: PcrRecord) -> Tuple[List[Tuple[str, str]], List[int]]:
    to = r.patient_care_transferred or ""
    fields = [("Patient Care Transferred To:", to)]
    extra = {
        "Paramedics": ("Unit #:", r.unit_number),
        "Police": ("Badge #:", r.badge_number),
        "Clinic": ("Clinic:", r.clinic_name),
    }.get(to)
    if extra and extra[1]:
        fields.append(extra)
        fields.append(("Time Care Transferred:", r.time_care_transferred or ""))
        return fields, [2, 1, 1]
    fields.append(("Time Care Transferred:", r.time_care_transferred or ""))
    return fields, [3, 1]


def add_transport_information(surface: DrawingSurface, r: PcrRecord, styles: ReportStyles) -> None:
    body = styles.body
    banner(surface, "CALL DESCRIPTION", styles.banner, keep_with=body.line_height)
    multiline_block(surface, "", r.comments, body)

    banner(surface, "PATIENT TRANSFER DETAILS", styles.banner, keep_with=body.line_height)
    fields, spans = transfer_fields(r)
    fields_row(surface, fields, spans, body)
    if r.patient_care_transferred == "Paramedics":
        fields_row(surface, [("Hospital Destination:", r.hospital_destination)], [4], body)

    caption(surface, "Comments:", body)
    multiline_block(surface, "", r.transfer_comments, body)
    surface.skip(mm_pt(4))


# -----------------------------
# Footer / attestation
# -----------------------------
def responders_line(r: PcrRecord) -> str:
    names = [
        f"Supervisor: {r.supervisor}" if r.supervisor else "",
        f"Responder 1: {r.responder1}" if r.responder1 else "",
        f"Responder 2: {r.responder2}" if r.responder2 else "",
        f"Responder 3: {r.responder3}" if r.responder3 else "",
    ]
    return join_filled(names, sep=" | ") or "Responders: Not Recorded"


def _footer_lines(r: PcrRecord, styles: ReportStyles, width: float) -> List[Tuple[str, TextStyle]]:
    small = styles.small
    bold = small.strong()
    lines = [(ln, bold) for ln in wrap_text(responders_line(r), width, bold)]
    lines += [(ln, small) for ln in wrap_text(SIGNATURE_STATEMENT, width, small)]
    return lines


def footer_strip_height(r: PcrRecord, styles: ReportStyles, width: float) -> float:
    used = mm_pt(3) + len(_footer_lines(r, styles, width)) * styles.small.line_height
    return max(FOOTER_STRIP_HEIGHT, used)


def add_signatures_and_footer(surface: DrawingSurface, r: PcrRecord, styles: ReportStyles) -> float:
    """
    Attestation strip pinned to the physical bottom of the last page.

    Replaces signature boxes with a statement listing the responders.
    Returns the top of the strip.
    """
    g = surface.geometry
    lines = _footer_lines(r, styles, g.content_width)
    strip_top = g.bottom_limit - footer_strip_height(r, styles, g.content_width)
    if surface.y > strip_top - FOOTER_CLEARANCE:
        surface.new_page()
        g = surface.geometry
        strip_top = g.bottom_limit - footer_strip_height(r, styles, g.content_width)

    surface.line(g.left, strip_top - mm_pt(2), g.right, strip_top - mm_pt(2), width=0.4)

    y = strip_top + mm_pt(2)
    for ln, style in lines:
        surface.text(g.left, y, ln, style, max_width=g.content_width)
        y += style.line_height

    surface.move_to(g.bottom_limit)
    return strip_top
