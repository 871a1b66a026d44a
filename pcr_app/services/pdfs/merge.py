# FILE: pcr_app/services/pdfs/merge.py
from __future__ import annotations

import logging
from io import BytesIO

from pypdf import PdfReader, PdfWriter

from pcr_app.core.errors import PdfMergeError

logger = logging.getLogger(__name__)


def append_pdf(base: bytes, appendix: bytes) -> bytes:
    """
    All pages of ``base`` followed by all pages of ``appendix``, in order.

    Any failure to read either document or to write the result raises
    ``PdfMergeError``; a half-merged report is never returned.
    """
    if not appendix:
        raise PdfMergeError("Appended document is empty")

    try:
        writer = PdfWriter()
        for part in (base, appendix):
            reader = PdfReader(BytesIO(part))
            for page in reader.pages:
                writer.add_page(page)

        out = BytesIO()
        writer.write(out)
    except Exception as exc:
        logger.exception("Failed to append document to report")
        raise PdfMergeError(f"Could not append document: {exc}") from exc

    merged = out.getvalue()
    logger.info("Appended document: %d + %d bytes -> %d bytes", len(base), len(appendix), len(merged))
    return merged
