# pcr_app/core/errors.py
from __future__ import annotations

from typing import List, Optional


class PcrPdfError(Exception):
    """Base class for report generation failures."""

    status_code: int = 500

    def __init__(self, message: str, *, details: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.details = list(details or [])


class PdfPreconditionError(PcrPdfError):
    """Record is missing the minimal fields needed to print it."""

    status_code = 422

    def __init__(self, errors: List[str]):
        super().__init__(
            "Please complete required fields: " + ", ".join(errors),
            details=errors,
        )


class PdfMergeError(PcrPdfError):
    """The appended sign-off document could not be parsed or copied."""

    status_code = 422


class PdfSerializationError(PcrPdfError):
    status_code = 500


class WorkflowStateError(PcrPdfError):
    status_code = 409


class PrintJobNotFound(PcrPdfError):
    status_code = 404
