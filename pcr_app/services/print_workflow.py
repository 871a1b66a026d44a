# FILE: pcr_app/services/print_workflow.py
"""
Operator print-confirm flow.

The report is generated lazily on the first preview or download, handed to
the presentation host, and only then can the operator confirm that it was
printed. Confirming or cancelling reports back through ``on_confirm`` and
releases the artifact's object URL.
"""
from __future__ import annotations

import asyncio
import enum
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Protocol, Union

from pcr_app.core.errors import WorkflowStateError
from pcr_app.schemas.pcr import PcrRecord
from pcr_app.schemas.pdf import PdfOptions
from pcr_app.services.pdf_artifacts import PdfArtifact
from pcr_app.services.pdfs.engine import generate_pcr_pdf
from pcr_app.utils.timezone import now_iso

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[bool, str], Union[None, Awaitable[None]]]


class WorkflowState(str, enum.Enum):
    IDLE = "IDLE"
    GENERATING = "GENERATING"
    AWAITING_PREVIEW_OR_DOWNLOAD = "AWAITING_PREVIEW_OR_DOWNLOAD"
    AWAITING_CONFIRMATION = "AWAITING_CONFIRMATION"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"


TERMINAL_STATES = frozenset({WorkflowState.CONFIRMED, WorkflowState.CANCELLED, WorkflowState.FAILED})


class PresentationHost(Protocol):
    """Shows or saves a generated report. Methods may be sync or async."""

    def show_preview(self, artifact: PdfArtifact) -> Any: ...

    def save(self, artifact: PdfArtifact) -> Any: ...


async def _maybe_await(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


class PrintConfirmWorkflow:
    def __init__(
        self,
        record: PcrRecord,
        options: Optional[PdfOptions] = None,
        *,
        on_confirm: ConfirmCallback,
        host: PresentationHost,
        allow_download: bool = True,
    ):
        self.record = record
        self.options = options or PdfOptions()
        self.on_confirm = on_confirm
        self.host = host
        self.allow_download = allow_download

        self.state = WorkflowState.IDLE
        self.artifact: Optional[PdfArtifact] = None
        self.confirmed_at: Optional[str] = None
        self.error: Optional[BaseException] = None
        self._lock = asyncio.Lock()

    @property
    def can_confirm(self) -> bool:
        return self.state == WorkflowState.AWAITING_CONFIRMATION

    # ---- generation ----
    async def generate(self) -> PdfArtifact:
        """Generate once; later calls return the same artifact."""
        self._require_open()
        if self.artifact is not None:
            return self.artifact
        if self.state == WorkflowState.GENERATING:
            raise WorkflowStateError("Report generation is already in progress")

        async with self._lock:
            self.state = WorkflowState.GENERATING
            try:
                self.artifact = await generate_pcr_pdf(self.record, self.options)
            except Exception as exc:
                self.state = WorkflowState.FAILED
                self.error = exc
                logger.exception("Print workflow failed to generate report %s", self.record.report_number)
                raise
            self.state = WorkflowState.AWAITING_PREVIEW_OR_DOWNLOAD
        return self.artifact

    async def preview(self) -> PdfArtifact:
        artifact = await self.generate()
        await _maybe_await(self.host.show_preview(artifact))
        self._enable_confirm()
        return artifact

    async def download(self) -> PdfArtifact:
        if not self.allow_download:
            raise WorkflowStateError("Download is not allowed for this report")
        artifact = await self.generate()
        await _maybe_await(self.host.save(artifact))
        self._enable_confirm()
        return artifact

    # ---- operator decision ----
    async def confirm(self) -> str:
        if not self.can_confirm:
            raise WorkflowStateError(
                f"Cannot confirm printing in state {self.state.value}; preview or download the report first"
            )
        stamp = now_iso()
        self.state = WorkflowState.CONFIRMED
        self.confirmed_at = stamp
        try:
            await _maybe_await(self.on_confirm(True, stamp))
        finally:
            self._release()
        logger.info("Report %s confirmed as printed at %s", self.record.report_number, stamp)
        return stamp

    async def cancel(self) -> None:
        self._require_open()
        if self.state == WorkflowState.GENERATING:
            raise WorkflowStateError("Cannot cancel while the report is being generated")
        self.state = WorkflowState.CANCELLED
        try:
            await _maybe_await(self.on_confirm(False, ""))
        finally:
            self._release()
        logger.info("Print of report %s cancelled", self.record.report_number)

    # ---- internals ----
    def _require_open(self) -> None:
        if self.state in TERMINAL_STATES:
            raise WorkflowStateError(f"Workflow already finished ({self.state.value})")

    def _enable_confirm(self) -> None:
        if self.state == WorkflowState.AWAITING_PREVIEW_OR_DOWNLOAD:
            self.state = WorkflowState.AWAITING_CONFIRMATION

    def _release(self) -> None:
        if self.artifact is not None:
            self.artifact.release()
