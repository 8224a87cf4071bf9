"""Tests for PDF render, publish and share download endpoints."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from resumify.api.main import app
from resumify.exceptions import ReconciliationError, RenderError
from resumify.services.artifact_publisher import ArtifactTriple
from resumify.services.reconciliation import apply_artifacts
from resumify.services.render_pipeline import RenderPipeline

HEADERS = {"X-User-Id": "pdf-user"}


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def resume(client: TestClient, pipeline: RenderPipeline) -> dict:
    body = {
        "title": "Data Engineer",
        "personalInfo": {"firstName": "Ada", "lastName": "Lovelace", "email": "ada@example.com"},
        "skills": ["Python"],
    }
    created = client.post("/api/resumes", json=body, headers=HEADERS).json()
    # Let the creation render settle so tests start from a known state.
    assert pipeline.wait_idle(timeout=10)
    return created


class TestDownload:
    def test_download_renders_current_state(
        self, client: TestClient, resume: dict, fake_engine
    ) -> None:
        client.patch(f"/api/resumes/{resume['id']}", json={"skills": ["Rust"]}, headers=HEADERS)

        response = client.get(f"/api/pdf/resume/{resume['id']}/download", headers=HEADERS)

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == (
            'attachment; filename="Ada_Lovelace_Resume.pdf"'
        )
        assert response.content.startswith(b"%PDF")
        assert "Rust" in fake_engine.calls[-1]

    def test_preview_is_inline(self, client: TestClient, resume: dict) -> None:
        response = client.get(f"/api/pdf/resume/{resume['id']}/preview", headers=HEADERS)

        assert response.status_code == 200
        assert response.headers["content-disposition"].startswith("inline;")

    def test_download_requires_owner(self, client: TestClient, resume: dict) -> None:
        response = client.get(
            f"/api/pdf/resume/{resume['id']}/download", headers={"X-User-Id": "intruder"}
        )
        assert response.status_code == 404

    def test_render_timeout_is_503(self, client: TestClient, resume: dict, fake_engine) -> None:
        fake_engine.error = RenderError("too slow", timed_out=True)
        response = client.get(f"/api/pdf/resume/{resume['id']}/download", headers=HEADERS)
        assert response.status_code == 503

    def test_render_crash_is_502(self, client: TestClient, resume: dict, fake_engine) -> None:
        fake_engine.error = RenderError("crashed")
        response = client.get(f"/api/pdf/resume/{resume['id']}/download", headers=HEADERS)
        assert response.status_code == 502
        assert response.json()["detail"] == "PDF rendering failed."


class TestPublish:
    def test_upload_returns_and_stores_artifacts(self, client: TestClient, resume: dict) -> None:
        response = client.post(f"/api/pdf/resume/{resume['id']}/upload", headers=HEADERS)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "published"
        assert body["revision"] == 1
        assert body["previewUrl"].endswith(".jpg")
        stored = client.get(f"/api/resumes/{resume['id']}", headers=HEADERS).json()
        assert stored["pdfUrl"] == body["pdfUrl"]
        assert stored["pdfAssetId"] == body["pdfAssetId"]

    def test_upload_failure_keeps_previous_artifacts(
        self, client: TestClient, resume: dict, fake_engine
    ) -> None:
        before = client.get(f"/api/resumes/{resume['id']}", headers=HEADERS).json()
        fake_engine.error = RenderError("crashed")

        response = client.post(f"/api/pdf/resume/{resume['id']}/upload", headers=HEADERS)

        assert response.status_code == 502
        after = client.get(f"/api/resumes/{resume['id']}", headers=HEADERS).json()
        assert after["pdfUrl"] == before["pdfUrl"]
        assert after["previewUrl"] == before["previewUrl"]

    def test_upload_timeout_is_503(self, client: TestClient, resume: dict, fake_engine) -> None:
        fake_engine.error = RenderError("too slow", timed_out=True)
        response = client.post(f"/api/pdf/resume/{resume['id']}/upload", headers=HEADERS)
        assert response.status_code == 503

    def test_reconcile_failure_is_502(self, client: TestClient, resume: dict) -> None:
        with patch(
            "resumify.services.render_pipeline.apply_artifacts",
            side_effect=ReconciliationError("locked"),
        ):
            response = client.post(f"/api/pdf/resume/{resume['id']}/upload", headers=HEADERS)
        assert response.status_code == 502
        assert response.json()["detail"] == "Failed to save PDF links."

    def test_superseded_upload_reports_stored_artifacts(
        self, client: TestClient, resume: dict
    ) -> None:
        newer = ArtifactTriple(
            pdf_url="https://cdn/newer.pdf",
            pdf_asset_id="newer",
            preview_url="https://cdn/newer.jpg",
            view_url="https://cdn/newer.pdf",
        )
        assert apply_artifacts(resume["id"], 99, newer)

        response = client.post(f"/api/pdf/resume/{resume['id']}/upload", headers=HEADERS)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "stale"
        assert body["pdfUrl"] == "https://cdn/newer.pdf"

    def test_upload_unknown_resume_is_404(self, client: TestClient) -> None:
        response = client.post("/api/pdf/resume/missing/upload", headers=HEADERS)
        assert response.status_code == 404


class TestSharedDownload:
    def test_public_resume_downloads_without_auth(self, client: TestClient, resume: dict) -> None:
        client.patch(
            f"/api/resumes/{resume['id']}/visibility",
            json={"visibility": "public"},
            headers=HEADERS,
        )

        response = client.get(f"/api/pdf/resume/share/{resume['shareId']}")

        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")

    def test_private_resume_is_404(self, client: TestClient, resume: dict) -> None:
        response = client.get(f"/api/pdf/resume/share/{resume['shareId']}")
        assert response.status_code == 404
