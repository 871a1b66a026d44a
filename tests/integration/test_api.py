"""HTTP surface: PDF generation, validation and the print-job workflow."""

from __future__ import annotations

import base64
from typing import Any

import pytest
from fastapi.testclient import TestClient

from pcr_app.main import app


@pytest.fixture
def client() -> TestClient:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def payload(record_data: dict[str, Any]) -> dict[str, Any]:
    return {"record": record_data, "options": {"includeImages": True}}


class TestPcrPdfEndpoint:
    def test_returns_inline_pdf(self, client: TestClient, payload) -> None:
        resp = client.post("/api/pdf/pcr", json=payload)
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert resp.headers["content-disposition"] == 'inline; filename="PCR_2026-03-14_C_1042_Jane_Doe.pdf"'
        assert resp.content.startswith(b"%PDF")

    def test_missing_required_fields(self, client: TestClient, payload) -> None:
        payload["record"]["callNumber"] = ""
        payload["record"]["reportNumber"] = None
        resp = client.post("/api/pdf/pcr", json=payload)
        assert resp.status_code == 422
        body = resp.json()
        assert body["ok"] is False
        assert body["error"]["code"] == "PdfPreconditionError"
        assert body["error"]["details"] == ["Call number is required", "Report number is required"]

    def test_bad_appended_document(self, client: TestClient, payload) -> None:
        payload["options"]["appendDocument"] = base64.b64encode(b"not a pdf").decode()
        resp = client.post("/api/pdf/pcr", json=payload)
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "PdfMergeError"

    def test_empty_appended_document(self, client: TestClient, payload) -> None:
        payload["options"]["appendDocument"] = ""
        resp = client.post("/api/pdf/pcr", json=payload)
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "PdfMergeError"

    def test_invalid_options(self, client: TestClient, payload) -> None:
        payload["options"]["format"] = "tabloid"
        resp = client.post("/api/pdf/pcr", json=payload)
        assert resp.status_code == 422
        assert resp.json()["error"]["msg"] == "Validation error"

    def test_validate_endpoint(self, client: TestClient, payload) -> None:
        resp = client.post("/api/pdf/pcr/validate", json=payload)
        assert resp.status_code == 200
        assert resp.json()["data"] == {"is_valid": True, "errors": []}

        payload["record"]["date"] = ""
        resp = client.post("/api/pdf/pcr/validate", json=payload)
        assert resp.json()["data"] == {"is_valid": False, "errors": ["Date is required"]}


class TestPrintJobs:
    def _create(self, client: TestClient, payload, **extra) -> str:
        resp = client.post("/api/print-jobs", json={**payload, **extra})
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["state"] == "IDLE"
        return data["job_id"]

    def test_confirm_requires_preview(self, client: TestClient, payload) -> None:
        job_id = self._create(client, payload)

        resp = client.post(f"/api/print-jobs/{job_id}/confirm")
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "WorkflowStateError"

        resp = client.get(f"/api/print-jobs/{job_id}/preview")
        assert resp.status_code == 200
        assert resp.content.startswith(b"%PDF")
        assert resp.headers["content-disposition"].startswith("inline;")

        state = client.get(f"/api/print-jobs/{job_id}").json()["data"]
        assert state["state"] == "AWAITING_CONFIRMATION"
        assert state["filename"] == "PCR_2026-03-14_C_1042_Jane_Doe.pdf"
        assert state["url"]

        resp = client.post(f"/api/print-jobs/{job_id}/confirm")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["state"] == "CONFIRMED"
        assert data["confirmed_at"].endswith("Z")
        assert data["url"] is None

    def test_download_then_cancel(self, client: TestClient, payload) -> None:
        job_id = self._create(client, payload)
        resp = client.get(f"/api/print-jobs/{job_id}/download")
        assert resp.status_code == 200
        assert resp.headers["content-disposition"].startswith("attachment;")

        resp = client.post(f"/api/print-jobs/{job_id}/cancel")
        assert resp.status_code == 200
        assert resp.json()["data"]["state"] == "CANCELLED"

        resp = client.post(f"/api/print-jobs/{job_id}/confirm")
        assert resp.status_code == 409

    def test_download_disallowed(self, client: TestClient, payload) -> None:
        job_id = self._create(client, payload, allowDownload=False)
        resp = client.get(f"/api/print-jobs/{job_id}/download")
        assert resp.status_code == 409

    def test_generation_failure_marks_job_failed(self, client: TestClient, payload) -> None:
        payload["record"]["patientName"] = ""
        job_id = self._create(client, payload)
        resp = client.get(f"/api/print-jobs/{job_id}/preview")
        assert resp.status_code == 422
        data = client.get(f"/api/print-jobs/{job_id}").json()["data"]
        assert data["state"] == "FAILED"
        assert "Patient name is required" in data["error"]

    def test_unknown_job(self, client: TestClient) -> None:
        resp = client.get("/api/print-jobs/does-not-exist")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "PrintJobNotFound"
