# FILE: pcr_app/services/print_jobs.py
from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from pcr_app.core.config import settings
from pcr_app.core.errors import PrintJobNotFound
from pcr_app.schemas.pcr import PcrRecord
from pcr_app.schemas.pdf import PdfOptions, PrintJobOut
from pcr_app.services.pdf_artifacts import PdfArtifact, registry as url_registry
from pcr_app.services.print_workflow import TERMINAL_STATES, PrintConfirmWorkflow, WorkflowState
from pcr_app.utils.timezone import now_utc

logger = logging.getLogger(__name__)


class RouteHost:
    """
    Presentation host behind the HTTP routes: the route itself streams the
    bytes back, so the host only counts what the operator was shown.
    """

    def __init__(self):
        self.previews = 0
        self.saves = 0

    def show_preview(self, artifact: PdfArtifact) -> None:
        self.previews += 1

    def save(self, artifact: PdfArtifact) -> None:
        self.saves += 1


@dataclass
class PrintJob:
    job_id: str
    workflow: PrintConfirmWorkflow
    host: RouteHost
    created_at: datetime = field(default_factory=now_utc)
    # (confirmed, timestamp) as reported through on_confirm
    outcome: Optional[Tuple[bool, str]] = None

    def record_outcome(self, confirmed: bool, timestamp: str) -> None:
        self.outcome = (confirmed, timestamp)

    def to_out(self) -> PrintJobOut:
        wf = self.workflow
        art = wf.artifact
        return PrintJobOut(
            job_id=self.job_id,
            state=wf.state.value,
            filename=art.filename if art else None,
            size=art.size if art else None,
            url=art.url if art and art.url in url_registry else None,
            confirmed_at=wf.confirmed_at,
            error=str(wf.error) if wf.error else None,
        )


class PrintJobRegistry:
    """
    Bounded in-memory store of workflows; the oldest finished jobs go first.
    Jobs that are generating are never evicted.
    """

    def __init__(self, limit: Optional[int] = None):
        self.limit = limit or settings.PRINT_JOB_LIMIT
        self._lock = threading.Lock()
        self._jobs: "OrderedDict[str, PrintJob]" = OrderedDict()

    def create(self, record: PcrRecord, options: PdfOptions, *, allow_download: bool = True) -> PrintJob:
        host = RouteHost()
        job_id = uuid.uuid4().hex
        job: Optional[PrintJob] = None

        def on_confirm(confirmed: bool, timestamp: str) -> None:
            job.record_outcome(confirmed, timestamp)

        wf = PrintConfirmWorkflow(record, options, on_confirm=on_confirm, host=host, allow_download=allow_download)
        job = PrintJob(job_id=job_id, workflow=wf, host=host)

        with self._lock:
            self._jobs[job_id] = job
            evicted = self._evict()
        for old in evicted:
            if old.workflow.artifact is not None:
                old.workflow.artifact.release()
            logger.info("Evicted print job %s (%s)", old.job_id, old.workflow.state.value)
        return job

    def get(self, job_id: str) -> PrintJob:
        with self._lock:
            job = self._jobs.get(job_id)
        if job is None:
            raise PrintJobNotFound(f"Print job {job_id} not found")
        return job

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def _evict(self) -> List[PrintJob]:
        # a job still generating would register its URL after eviction, so it stays
        evicted: List[PrintJob] = []
        while len(self._jobs) > self.limit:
            idle = [k for k, j in self._jobs.items() if j.workflow.state != WorkflowState.GENERATING]
            if not idle:
                logger.warning("Print job limit %s exceeded while every job is generating", self.limit)
                break
            victim = next((k for k in idle if self._jobs[k].workflow.state in TERMINAL_STATES), idle[0])
            evicted.append(self._jobs.pop(victim))
        return evicted


jobs = PrintJobRegistry()
