# FILE: pcr_app/api/routes_print_jobs.py
from __future__ import annotations

import logging

from fastapi import APIRouter

from pcr_app.api.routes_pcr_pdf import pdf_response
from pcr_app.schemas.pdf import PrintJobCreate
from pcr_app.services.print_jobs import jobs
from pcr_app.utils.resp import ok

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/print-jobs", tags=["Print jobs"])


@router.post("")
def create_print_job(payload: PrintJobCreate):
    job = jobs.create(payload.record, payload.options.to_options(), allow_download=payload.allow_download)
    logger.info("Print job %s created for report %s", job.job_id, payload.record.report_number)
    return ok(job.to_out(), status_code=201)


@router.get("/{job_id}")
def get_print_job(job_id: str):
    return ok(jobs.get(job_id).to_out())


@router.get("/{job_id}/preview")
async def preview_print_job(job_id: str):
    job = jobs.get(job_id)
    artifact = await job.workflow.preview()
    return pdf_response(artifact.content, artifact.filename)


@router.get("/{job_id}/download")
async def download_print_job(job_id: str):
    job = jobs.get(job_id)
    artifact = await job.workflow.download()
    return pdf_response(artifact.content, artifact.filename, disposition="attachment")


@router.post("/{job_id}/confirm")
async def confirm_print_job(job_id: str):
    job = jobs.get(job_id)
    await job.workflow.confirm()
    return ok(job.to_out(), message="Print confirmed")


@router.post("/{job_id}/cancel")
async def cancel_print_job(job_id: str):
    job = jobs.get(job_id)
    await job.workflow.cancel()
    return ok(job.to_out(), message="Print cancelled")
