"""
End-to-end tests for the validation API.
"""
import os
from dataclasses import replace

import httpx
import pytest
from fastapi.testclient import TestClient
from lxml import etree

from pdf_fixtures import NOT_A_PDF, build_encrypted_pdf, build_minimal_pdf, sha1_hex

from main import app
from pdfa_service.api.dependencies import get_input_resolver
from pdfa_service.core.config import settings
from pdfa_service.core.error_handling import PipelineIOError, RenderTransformError
from pdfa_service.services.batch_pipeline import BatchPipelineOrchestrator
from pdfa_service.services.input_resolver import InputResolver
from pdfa_service.services.report_renderer import ReportRenderer
from pdfa_service.services.staging_store import StagingStore


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def staging_dir(client, tmp_path):
    app.state.validation_context = replace(app.state.validation_context, staging_dir=str(tmp_path))
    return tmp_path


def _upload(pdf: bytes, name: str = "doc.pdf"):
    return {"file": (name, pdf, "application/pdf")}


def _refusing_resolver(calls):
    def refuse(request):
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)
    return InputResolver(client=httpx.Client(transport=httpx.MockTransport(refuse)))


def test_upload_compliant_json(client):
    pdf = build_minimal_pdf()

    response = client.post("/1b", files=_upload(pdf), data={"sha1Hex": sha1_hex(pdf)})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    body = response.json()
    assert body["isCompliant"] is True
    assert body["pdfaFlavour"] == "1b"
    assert "X-Request-ID" in response.headers


def test_wildcard_accept_returns_json(client):
    response = client.post("/1b", files=_upload(build_minimal_pdf()), headers={"Accept": "*/*"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")


def test_upload_non_compliant_json(client):
    response = client.post("/1a", files=_upload(build_minimal_pdf()))

    assert response.status_code == 200
    body = response.json()
    assert body["isCompliant"] is False
    assert body["assertions"]


def test_upload_xml(client):
    response = client.post("/1b", files=_upload(build_minimal_pdf()), headers={"Accept": "application/xml"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/xml")
    root = etree.fromstring(response.content)
    assert root.get("isCompliant") == "true"


def test_text_xml_accept_selects_xml(client):
    response = client.post("/1b", files=_upload(build_minimal_pdf()), headers={"Accept": "text/xml"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/xml")


def test_not_a_pdf_is_415_plain_text(client):
    response = client.post("/1b", files=_upload(NOT_A_PDF, "notes.txt"))

    assert response.status_code == 415
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == "File does not appear to be a PDF."
    assert "X-Request-ID" in response.headers


def test_not_a_pdf_with_matching_digest_is_415(client):
    response = client.post("/1b", files=_upload(NOT_A_PDF), data={"sha1Hex": sha1_hex(NOT_A_PDF)})

    assert response.status_code == 415


def test_digest_mismatch_is_server_error(client):
    response = client.post("/1b", files=_upload(NOT_A_PDF), data={"sha1Hex": "0" * 40})

    assert response.status_code == 500


def test_both_inputs_rejected(client):
    calls = []
    app.dependency_overrides[get_input_resolver] = lambda: _refusing_resolver(calls)

    response = client.post(
        "/1b",
        files=_upload(build_minimal_pdf()),
        data={"url": "http://unreachable.invalid/doc.pdf"},
    )

    assert response.status_code == 400
    assert calls == []


def test_missing_input_rejected(client):
    response = client.post("/1b", data={"sha1Hex": ""})

    assert response.status_code == 400


def test_unknown_profile_is_404_without_fetch(client):
    calls = []
    app.dependency_overrides[get_input_resolver] = lambda: _refusing_resolver(calls)

    response = client.post("/9z", data={"url": "http://unreachable.invalid/doc.pdf"})

    assert response.status_code == 404
    assert calls == []


def test_unreachable_url_is_502(client):
    calls = []
    app.dependency_overrides[get_input_resolver] = lambda: _refusing_resolver(calls)

    response = client.post("/1b", data={"url": "http://unreachable.invalid/doc.pdf"})

    assert response.status_code == 502
    assert len(calls) == 1


def test_unreachable_url_html_never_stages(client, monkeypatch):
    calls = []
    app.dependency_overrides[get_input_resolver] = lambda: _refusing_resolver(calls)

    def fail_stage(self, stream):
        raise AssertionError("staging must not run")

    monkeypatch.setattr(StagingStore, "stage", fail_stage)

    response = client.post(
        "/1b",
        data={"url": "http://unreachable.invalid/doc.pdf"},
        headers={"Accept": "text/html"},
    )

    assert response.status_code == 502


def test_url_document_validated(client):
    pdf = build_minimal_pdf()
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=pdf))
    app.dependency_overrides[get_input_resolver] = lambda: InputResolver(client=httpx.Client(transport=transport))

    response = client.post("/1b", data={"url": "https://example.org/doc.pdf", "sha1Hex": sha1_hex(pdf)})

    assert response.status_code == 200
    assert response.json()["isCompliant"] is True


def test_html_report(client, staging_dir):
    response = client.post(
        "/1b",
        files=_upload(build_minimal_pdf(with_metadata=False)),
        headers={"Accept": "text/html"},
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert settings.RULES_WIKI_URL_BASE in response.text
    assert "PDFA-Part-1-rules#rule-672-1" in response.text
    assert os.listdir(staging_dir) == []


def test_html_report_for_non_pdf_still_renders(client, staging_dir):
    response = client.post("/1b", files=_upload(NOT_A_PDF), headers={"Accept": "text/html"})

    assert response.status_code == 200
    assert settings.RULES_WIKI_URL_BASE in response.text
    assert os.listdir(staging_dir) == []


def test_password_protected_pdf_is_not_415(client):
    pdf = build_encrypted_pdf("secret")

    response = client.post("/1b", files=_upload(pdf), data={"sha1Hex": sha1_hex(pdf)})

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    assert "encrypted" in response.json()["detail"]


def test_password_protected_pdf_html_report(client, staging_dir):
    response = client.post("/1b", files=_upload(build_encrypted_pdf("secret")), headers={"Accept": "text/html"})

    assert response.status_code == 200
    assert os.listdir(staging_dir) == []


def test_html_report_without_summary_cleans_up(client, staging_dir, monkeypatch):
    staged = []

    def no_summary(self, artifact, profile):
        staged.append(artifact.path.exists())
        return b"", None

    monkeypatch.setattr(BatchPipelineOrchestrator, "run", no_summary)

    response = client.post("/1b", files=_upload(build_minimal_pdf()), headers={"Accept": "text/html"})

    assert response.status_code == 500
    assert staged == [True]
    assert os.listdir(staging_dir) == []


def test_html_report_pipeline_error_cleans_up(client, staging_dir, monkeypatch):
    def unwritable(self, artifact, profile):
        raise PipelineIOError("disk full")

    monkeypatch.setattr(BatchPipelineOrchestrator, "run", unwritable)

    response = client.post("/1b", files=_upload(build_minimal_pdf()), headers={"Accept": "text/html"})

    assert response.status_code == 500
    assert "disk full" in response.json()["detail"]
    assert os.listdir(staging_dir) == []


def test_html_report_render_error_cleans_up(client, staging_dir, monkeypatch):
    def broken(self, report_bytes, summary, base_url, full_html=False):
        raise RenderTransformError("bad stylesheet")

    monkeypatch.setattr(ReportRenderer, "render", broken)

    response = client.post("/1b", files=_upload(build_minimal_pdf()), headers={"Accept": "text/html"})

    assert response.status_code == 500
    assert "bad stylesheet" in response.json()["detail"]
    assert os.listdir(staging_dir) == []


def test_unsupported_accept_is_406(client):
    response = client.post("/1b", files=_upload(build_minimal_pdf()), headers={"Accept": "image/png"})

    assert response.status_code == 406


def test_profiles_listed(client):
    response = client.get("/profiles")

    assert response.status_code == 200
    ids = {profile["id"] for profile in response.json()}
    assert ids == {"1a", "1b", "2a", "2b", "2u", "3a", "3b", "3u"}


def test_profile_details(client):
    response = client.get("/profiles/2u")

    assert response.status_code == 200
    body = response.json()
    assert body["specification"] == "ISO 19005-2:2011"
    assert body["ruleCount"] == len(body["rules"])


def test_unknown_profile_details(client):
    response = client.get("/profiles/zz")

    assert response.status_code == 404


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["profiles_loaded"] == 8
    assert body["status"] in ("healthy", "degraded")

    root = client.get("/")
    assert root.json()["status"] == "healthy"


def test_health_probes_context_staging_dir(client, staging_dir):
    response = client.get("/health")

    body = response.json()
    assert body["staging_writable"] is True
    assert body["staging_directory"] == str(staging_dir)
    assert os.listdir(staging_dir) == []


def test_health_reports_unwritable_staging_dir(client, tmp_path):
    missing = tmp_path / "gone"
    app.state.validation_context = replace(app.state.validation_context, staging_dir=str(missing))

    body = client.get("/health").json()

    assert body["staging_writable"] is False
    assert body["status"] == "degraded"
