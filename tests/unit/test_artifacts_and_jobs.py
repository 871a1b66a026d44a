"""Tests for object URLs, artifacts and the print-job registry."""

from __future__ import annotations

import asyncio

import pytest

from pcr_app.core.errors import PrintJobNotFound
from pcr_app.services import print_workflow
from pcr_app.services.pdf_artifacts import ObjectUrlRegistry, PdfArtifact, registry
from pcr_app.services.pdfs.engine import generate_pcr_pdf
from pcr_app.services.print_jobs import PrintJobRegistry
from pcr_app.services.print_workflow import WorkflowState


class TestObjectUrlRegistry:
    def test_create_resolve_revoke(self) -> None:
        urls = ObjectUrlRegistry(prefix="blob:test")
        url = urls.create(b"%PDF-1.4")
        assert url.startswith("blob:test:")
        assert urls.resolve(url) == b"%PDF-1.4"
        assert urls.revoke(url) is True
        assert urls.resolve(url) is None
        assert urls.revoke(url) is False

    def test_urls_are_unique(self) -> None:
        urls = ObjectUrlRegistry(prefix="blob:test")
        assert urls.create(b"a") != urls.create(b"a")
        assert len(urls) == 2


class TestPdfArtifact:
    def test_context_manager_releases(self) -> None:
        url = registry.create(b"%PDF")
        with PdfArtifact(content=b"%PDF", url=url, filename="x.pdf", size=4) as artifact:
            assert artifact.url in registry
        assert url not in registry

    def test_release_is_idempotent(self) -> None:
        artifact = PdfArtifact(content=b"%PDF", url=registry.create(b"%PDF"), filename="x.pdf", size=4)
        artifact.release()
        artifact.release()
        assert artifact.url not in registry

    def test_is_immutable(self) -> None:
        artifact = PdfArtifact(content=b"", url="blob:x", filename="x.pdf", size=0)
        with pytest.raises(AttributeError):
            artifact.size = 5


class TestPrintJobRegistry:
    def test_unknown_job(self) -> None:
        with pytest.raises(PrintJobNotFound):
            PrintJobRegistry(limit=2).get("nope")

    def test_new_job_is_idle(self, minimal_record, options) -> None:
        jobs = PrintJobRegistry(limit=2)
        job = jobs.create(minimal_record, options)
        out = job.to_out()
        assert out.state == "IDLE"
        assert out.filename is None and out.url is None
        assert jobs.get(job.job_id) is job

    @pytest.mark.asyncio
    async def test_confirm_outcome_is_recorded(self, minimal_record, options) -> None:
        jobs = PrintJobRegistry(limit=2)
        job = jobs.create(minimal_record, options)
        await job.workflow.preview()
        assert job.host.previews == 1
        assert job.to_out().url is not None
        stamp = await job.workflow.confirm()
        assert job.outcome == (True, stamp)
        out = job.to_out()
        assert out.state == WorkflowState.CONFIRMED.value
        assert out.confirmed_at == stamp
        assert out.url is None

    @pytest.mark.asyncio
    async def test_finished_jobs_are_evicted_first(self, minimal_record, options) -> None:
        jobs = PrintJobRegistry(limit=2)
        open_job = jobs.create(minimal_record, options)
        done = jobs.create(minimal_record, options)
        await done.workflow.cancel()
        newest = jobs.create(minimal_record, options)

        assert len(jobs) == 2
        assert jobs.get(open_job.job_id) is open_job
        assert jobs.get(newest.job_id) is newest
        with pytest.raises(PrintJobNotFound):
            jobs.get(done.job_id)

    def test_oldest_job_evicted_when_none_finished(self, minimal_record, options) -> None:
        jobs = PrintJobRegistry(limit=1)
        first = jobs.create(minimal_record, options)
        jobs.create(minimal_record, options)
        with pytest.raises(PrintJobNotFound):
            jobs.get(first.job_id)

    @pytest.mark.asyncio
    async def test_generating_job_is_not_evicted(self, minimal_record, options, monkeypatch) -> None:
        gate = asyncio.Event()

        async def held_generate(record, opts):
            await gate.wait()
            return await generate_pcr_pdf(record, opts)

        monkeypatch.setattr(print_workflow, "generate_pcr_pdf", held_generate)
        jobs = PrintJobRegistry(limit=1)
        busy = jobs.create(minimal_record, options)
        task = asyncio.create_task(busy.workflow.preview())
        await asyncio.sleep(0)
        assert busy.workflow.state == WorkflowState.GENERATING

        newest = jobs.create(minimal_record, options)
        assert jobs.get(busy.job_id) is busy
        assert jobs.get(newest.job_id) is newest

        gate.set()
        artifact = await task
        assert artifact.url in registry

        # once generation is over the job can go, and its URL with it
        jobs.create(minimal_record, options)
        assert len(jobs) == 1
        with pytest.raises(PrintJobNotFound):
            jobs.get(busy.job_id)
        assert artifact.url not in registry
