import asyncio
import base64
import io

import httpx
import pytest
from fastapi.testclient import TestClient

from app.api.endpoints.pipeline import get_pipeline
from app.core.config import settings
from app.main import app

from conftest import FakeGemini, candidate

PNG = ("sign.png", b"\x89PNG\r\n\x1a\nfake", "image/png")


@pytest.fixture
def api(make_pipeline):
    """Returns a (client, fake) factory wired to a pipeline backed by FakeGemini"""
    def _api(*responses):
        fake = FakeGemini(*responses)
        pipeline = make_pipeline(fake)
        app.dependency_overrides[get_pipeline] = lambda: pipeline
        return TestClient(app), fake

    yield _api
    app.dependency_overrides.clear()


def test_root_and_health():
    client = TestClient(app)
    assert client.get("/").json()["ui"] == "/ui/"
    assert client.get("/health").json()["status"] == "healthy"


def test_ui_page_is_served():
    response = TestClient(app).get("/ui/")
    assert response.status_code == 200
    assert "Hindi Text Extractor" in response.text


def test_languages():
    body = TestClient(app).get("/api/v1/pipeline/languages").json()
    assert body["languages"] == [
        {"code": "en", "name": "English"},
        {"code": "bn", "name": "Bengali"},
    ]
    assert body["default"] == "en"


def test_full_run_through_the_api(api):
    client, fake = api(candidate("नमस्ते"), candidate("নমস্কার"))

    response = client.put("/api/v1/pipeline/image", files={"image": PNG})
    assert response.status_code == 200
    assert response.json() == {"filename": "sign.png", "mime_type": "image/png", "size": len(PNG[1])}

    preview = client.get("/api/v1/pipeline/image").json()
    assert preview["mime_type"] == "image/png"
    assert preview["data_url"] == "data:image/png;base64," + base64.b64encode(PNG[1]).decode()

    state = client.put("/api/v1/pipeline/language", json={"target_language": "bn"}).json()
    assert state["target_language_name"] == "Bengali"

    state = client.post("/api/v1/pipeline/run").json()
    assert state["status"] == "succeeded"
    assert state["is_busy"] is False
    assert state["extracted_text"] == "नमस्ते"
    assert state["translated_text"] == "নমস্কার"
    assert "into Bengali:" in fake.prompt(1)

    assert client.get("/api/v1/pipeline/status").json() == state


def test_run_without_image_reports_failure(api):
    client, fake = api()

    state = client.post("/api/v1/pipeline/run").json()

    assert state["status"] == "failed"
    assert state["error_code"] == "no_image_selected"
    assert fake.requests == []


def test_clearing_image(api):
    client, _ = api()
    client.put("/api/v1/pipeline/image", files={"image": PNG})

    state = client.delete("/api/v1/pipeline/image").json()

    assert state["has_image"] is False
    assert client.get("/api/v1/pipeline/image").status_code == 404


def test_upload_must_be_an_image(api):
    client, _ = api()
    response = client.put(
        "/api/v1/pipeline/image",
        files={"image": ("notes.txt", b"hello", "text/plain")}
    )
    assert response.status_code == 400


def test_upload_size_limit(api, monkeypatch):
    client, _ = api()
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 4)
    response = client.put("/api/v1/pipeline/image", files={"image": PNG})
    assert response.status_code == 413


def test_unknown_language_is_rejected(api):
    client, _ = api()
    response = client.put("/api/v1/pipeline/language", json={"target_language": "fr"})
    assert response.status_code == 422


def test_process_one_shot(api):
    client, fake = api(candidate("नमस्ते"), candidate("Hello"))

    response = client.post(
        "/api/v1/pipeline/process",
        files={"image": PNG},
        data={"target_language": "en"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["extracted_text"] == "नमस्ते"
    assert body["translated_text"] == "Hello"
    assert body["target_language"] == "en"
    # shared pipeline state is untouched
    assert client.get("/api/v1/pipeline/status").json()["has_image"] is False


@pytest.mark.parametrize("responses, status_code", [
    ([{"candidates": []}], 422),
    ([candidate("")], 422),
    ([httpx.ConnectError("offline")], 502),
    ([candidate("नमस्ते"), httpx.Response(500, json={"error": {"message": "boom"}})], 502),
])
def test_process_maps_pipeline_errors(api, responses, status_code):
    client, _ = api(*responses)
    response = client.post("/api/v1/pipeline/process", files={"image": PNG})
    assert response.status_code == status_code
    assert response.json()["detail"]


def test_declared_upload_size_is_checked_before_reading(monkeypatch):
    from fastapi import HTTPException, UploadFile
    from starlette.datastructures import Headers

    from app.api.endpoints import pipeline as endpoints

    async def must_not_read(file):
        raise AssertionError("oversized upload was read")

    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 4)
    monkeypatch.setattr(endpoints.image_service, "read_upload", must_not_read)
    upload = UploadFile(
        file=io.BytesIO(PNG[1]),
        size=len(PNG[1]),
        filename="sign.png",
        headers=Headers({"content-type": "image/png"})
    )

    with pytest.raises(HTTPException) as exc_info:
        asyncio.run(endpoints.read_image_upload(upload))
    assert exc_info.value.status_code == 413
