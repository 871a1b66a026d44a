# FILE: pcr_app/services/pdfs/engine.py
from __future__ import annotations

import asyncio
import io
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from reportlab.lib.utils import ImageReader

from pcr_app.core.config import settings
from pcr_app.core.errors import PdfPreconditionError, PdfSerializationError
from pcr_app.schemas.pcr import PcrRecord
from pcr_app.schemas.pdf import PdfOptions
from pcr_app.services.pdf_artifacts import PdfArtifact, registry
from pcr_app.services.pdfs import pcr_sections as sections
from pcr_app.services.pdfs.images import load_annotation
from pcr_app.services.pdfs.merge import append_pdf
from pcr_app.services.pdfs.surface import DrawingSurface, PlacedText, new_surface
from pcr_app.utils.text import is_blank, safe_str, sanitize_filename_part
from pcr_app.utils.timezone import now_utc

logger = logging.getLogger(__name__)

_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y", "%d-%m-%Y", "%Y-%m-%dT%H:%M", "%Y-%m-%dT%H:%M:%S")


# -----------------------------
# Preconditions / filename
# -----------------------------
def validate_record_for_pdf(record: PcrRecord) -> List[str]:
    errors: List[str] = []
    if is_blank(record.date):
        errors.append("Date is required")
    if is_blank(record.patient_name):
        errors.append("Patient name is required")
    if is_blank(record.call_number):
        errors.append("Call number is required")
    if is_blank(record.report_number):
        errors.append("Report number is required")
    return errors


def ensure_printable(record: PcrRecord) -> None:
    errors = validate_record_for_pdf(record)
    if errors:
        raise PdfPreconditionError(errors)


def _iso_date(value: Optional[str]) -> str:
    raw = safe_str(value).strip()
    if not raw:
        return "undated"
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).strftime("%Y-%m-%d")
        except ValueError:
            continue
    # keep whatever the form sent, made filename-safe
    return sanitize_filename_part(raw)


def pcr_filename(record: PcrRecord) -> str:
    """``PCR_<yyyy-mm-dd>_<call #>_<patient name>.pdf``; depends only on those three fields."""
    call = safe_str(record.call_number).strip() or "unknown"
    patient = safe_str(record.patient_name).strip() or "patient"
    return f"PCR_{_iso_date(record.date)}_{sanitize_filename_part(call)}_{sanitize_filename_part(patient)}.pdf"


# -----------------------------
# Build
# -----------------------------
def render_pcr(surface: DrawingSurface, record: PcrRecord, options: PdfOptions,
               image: Optional[ImageReader] = None) -> None:
    """Every section, in report order, on one surface."""
    styles = sections.ReportStyles.from_base(options.font_size)
    sections.add_header(
        surface, styles,
        title=settings.PDF_REPORT_TITLE,
        generated_at=options.generated_at or now_utc(),
        logo_path=settings.PDF_LOGO_PATH if options.include_images else None,
    )
    sections.add_basic_information(surface, record, styles)
    sections.add_patient_information(surface, record, styles)
    sections.add_medical_history(surface, record, styles)
    sections.add_treatment(surface, record, styles)
    sections.add_pain_assessment(surface, record, styles, image if options.include_images else None)
    sections.add_vital_signs(surface, record, styles)
    sections.add_oxygen_protocol(surface, record, styles)
    sections.add_transport_information(surface, record, styles)
    sections.add_signatures_and_footer(surface, record, styles)


def build_pcr_pdf(
    record: PcrRecord,
    options: Optional[PdfOptions] = None,
    *,
    image: Optional[ImageReader] = None,
    trace: bool = False,
) -> Tuple[bytes, Optional[List[PlacedText]]]:
    """
    Draw the report synchronously and serialize it.

    Returns the PDF bytes and, when ``trace`` is set, every placed text
    line (page, position, measured width, allotted width).
    """
    options = options or PdfOptions()
    buf = io.BytesIO()
    try:
        surface = new_surface(buf, options, title=f"PCR {safe_str(record.report_number)}", trace=trace)
        render_pcr(surface, record, options, image)
        surface.canvas.showPage()
        surface.canvas.save()
    except Exception as exc:
        logger.exception("PCR PDF build failed (report=%s)", record.report_number)
        raise PdfSerializationError(f"Failed to generate PDF: {exc}") from exc

    pdf = buf.getvalue()
    logger.info("PCR PDF built: report=%s pages=%s bytes=%s", record.report_number, surface.page, len(pdf))
    return pdf, surface.trace


async def generate_pcr_pdf(record: PcrRecord, options: Optional[PdfOptions] = None) -> PdfArtifact:
    """
    Full pipeline: precondition check, annotation decode, draw, optional
    appendix merge, filename, then an artifact whose URL the caller releases.
    """
    options = options or PdfOptions()
    ensure_printable(record)

    image = await load_annotation(record.injury_canvas) if options.include_images else None
    pdf, _ = build_pcr_pdf(record, options, image=image)

    if options.append_document is not None:
        pdf = await asyncio.to_thread(append_pdf, pdf, options.append_document)

    filename = pcr_filename(record)
    url = registry.create(pdf)
    return PdfArtifact(content=pdf, url=url, filename=filename, size=len(pdf))
