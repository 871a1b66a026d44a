from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Base64Bytes, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pcr_app.core.config import settings
from pcr_app.schemas.pcr import PcrRecord

Orientation = Literal["portrait", "landscape"]
PageFormat = Literal["letter", "a4", "legal"]
# largest body size whose labels and table cells still fit their columns
MAX_FONT_SIZE = 16


class PdfMargins(BaseModel):
    """Four-sided page insets, in millimetres."""

    model_config = ConfigDict(frozen=True)

    top: float = Field(default_factory=lambda: settings.PDF_MARGIN_MM, ge=0)
    right: float = Field(default_factory=lambda: settings.PDF_MARGIN_MM, ge=0)
    bottom: float = Field(default_factory=lambda: settings.PDF_MARGIN_MM, ge=0)
    left: float = Field(default_factory=lambda: settings.PDF_MARGIN_MM, ge=0)


class PdfOptions(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    orientation: Orientation = Field(default_factory=lambda: settings.PDF_ORIENTATION)
    format: PageFormat = Field(default_factory=lambda: settings.PDF_PAGE_FORMAT)
    font_size: float = Field(default_factory=lambda: settings.PDF_FONT_SIZE, gt=3, le=MAX_FONT_SIZE)
    margins: PdfMargins = Field(default_factory=PdfMargins)
    include_images: bool = Field(default_factory=lambda: settings.PDF_INCLUDE_IMAGES)
    show_page_numbers: bool = Field(default_factory=lambda: settings.PDF_SHOW_PAGE_NUMBERS)
    # signed sign-off document appended after the generated pages
    append_document: Optional[bytes] = Field(default=None, repr=False)
    # pins the "Generated:" banner timestamp; None means "now"
    generated_at: Optional[datetime] = None


# --------------------
# API payloads
# --------------------
class PdfOptionsIn(BaseModel):
    """Over HTTP the appended document travels base64 encoded."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    orientation: Optional[Orientation] = None
    format: Optional[PageFormat] = None
    font_size: Optional[float] = Field(default=None, gt=3, le=MAX_FONT_SIZE)
    margins: Optional[PdfMargins] = None
    include_images: Optional[bool] = None
    show_page_numbers: Optional[bool] = None
    append_document: Optional[Base64Bytes] = None

    def to_options(self) -> PdfOptions:
        # Base64Bytes re-encodes on dump, so the decoded appendix is passed as is
        data = self.model_dump(exclude_none=True, exclude={"append_document"})
        if self.append_document is not None:
            data["append_document"] = self.append_document
        return PdfOptions(**data)


class PcrPdfRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    record: PcrRecord
    options: PdfOptionsIn = Field(default_factory=PdfOptionsIn)


class PdfValidationOut(BaseModel):
    is_valid: bool
    errors: List[str] = Field(default_factory=list)


class PrintJobCreate(PcrPdfRequest):
    allow_download: bool = True


class PrintJobOut(BaseModel):
    job_id: str
    state: str
    filename: Optional[str] = None
    size: Optional[int] = None
    url: Optional[str] = None
    confirmed_at: Optional[str] = None
    error: Optional[str] = None
