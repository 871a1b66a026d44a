# FILE: pcr_app/api/routes_pcr_pdf.py
from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import Response

from pcr_app.schemas.pdf import PcrPdfRequest, PdfValidationOut
from pcr_app.services.pdfs.engine import generate_pcr_pdf, validate_record_for_pdf
from pcr_app.utils.resp import ok

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pdf/pcr", tags=["PCR PDF"])


def pdf_response(content: bytes, filename: str, *, disposition: str = "inline") -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'{disposition}; filename="{filename}"'},
    )


@router.post("")
async def create_pcr_pdf(payload: PcrPdfRequest):
    """Render the report and stream it back; nothing is kept server side."""
    artifact = await generate_pcr_pdf(payload.record, payload.options.to_options())
    with artifact:
        logger.info("PCR PDF served: %s (%s bytes)", artifact.filename, artifact.size)
        return pdf_response(artifact.content, artifact.filename)


@router.post("/validate")
def validate_pcr_pdf(payload: PcrPdfRequest):
    errors = validate_record_for_pdf(payload.record)
    return ok(PdfValidationOut(is_valid=not errors, errors=errors))
