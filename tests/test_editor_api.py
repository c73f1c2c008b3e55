"""
Tests for the editor HTTP API.

The database session and the AI client are overridden; the startup hook
is not run so no database file is created.
"""
import base64
import logging

import pytest
import structlog
from fastapi.testclient import TestClient

from api.dependencies import get_ai_client
from data.database import get_db
from serving.editor_api import app
from serving.processing_guard import processing_guard
from serving import editor_service
from utils.logging import configure_logging, get_logger


@pytest.fixture
def client(test_db_session, fake_ai_client):
    app.dependency_overrides[get_db] = lambda: test_db_session
    app.dependency_overrides[get_ai_client] = lambda: fake_ai_client
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def json_logging(monkeypatch):
    """Server logging as configured at startup with default settings."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    configure_logging("INFO", json_output=True)
    # module loggers cache their first configuration
    monkeypatch.setattr(editor_service, "logger", get_logger(editor_service.__name__))
    yield
    structlog.reset_defaults()
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def uploaded(client, sample_pdf):
    response = client.post(
        "/documents",
        files={"file": ("report.pdf", sample_pdf, "application/pdf")}
    )
    assert response.status_code == 200
    return response.json()


class TestDocuments:

    def test_upload(self, uploaded):
        assert uploaded["filename"] == "report.pdf"
        assert uploaded["total_pages"] == 3
        assert uploaded["current_page"] == 1
        assert uploaded["active_tool"] == "view"
        assert uploaded["is_processing"] is False

    def test_upload_non_pdf(self, client, sample_png):
        response = client.post("/documents", files={"file": ("a.png", sample_png, "image/png")})

        assert response.status_code == 400
        assert response.json()["detail"] == "Please select a valid PDF file."

    def test_get_and_list(self, client, uploaded):
        assert client.get(f"/documents/{uploaded['id']}").json()["id"] == uploaded["id"]
        assert [d["id"] for d in client.get("/documents").json()] == [uploaded["id"]]

    def test_not_found(self, client):
        assert client.get("/documents/missing").status_code == 404
        assert client.get("/documents/missing/download").status_code == 404

    def test_download(self, client, uploaded, sample_pdf):
        response = client.get(f"/documents/{uploaded['id']}/download")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert 'filename="report.pdf"' in response.headers["content-disposition"]
        assert response.content == sample_pdf

    def test_delete(self, client, uploaded):
        assert client.delete(f"/documents/{uploaded['id']}").status_code == 200
        assert client.delete(f"/documents/{uploaded['id']}").status_code == 404


class TestViewer:

    def test_render_headers(self, client, uploaded):
        response = client.get(f"/documents/{uploaded['id']}/pages/1/render")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert float(response.headers["x-render-scale"]) == 1.5
        assert response.headers["x-image-width"] == "918"
        assert response.headers["x-image-height"] == "1188"

    def test_render_bad_page(self, client, uploaded):
        assert client.get(f"/documents/{uploaded['id']}/pages/9/render").status_code == 400

    def test_thumbnail(self, client, uploaded):
        response = client.get(f"/documents/{uploaded['id']}/pages/2/thumbnail")

        assert response.status_code == 200
        assert float(response.headers["x-render-scale"]) == 0.2

    def test_current_page_and_tool(self, client, uploaded):
        doc_id = uploaded["id"]

        assert client.put(f"/documents/{doc_id}/current-page", json={"page": 2}).json()["current_page"] == 2
        assert client.put(f"/documents/{doc_id}/current-page", json={"page": 4}).status_code == 400
        assert client.put(f"/documents/{doc_id}/tool", json={"tool": "draw"}).json()["active_tool"] == "draw"
        assert client.put(f"/documents/{doc_id}/tool", json={"tool": "lasso"}).status_code == 400


class TestPageOperations:

    def test_split(self, client, uploaded):
        response = client.post(f"/documents/{uploaded['id']}/split", json={"split_page": 2})

        assert response.status_code == 200
        body = response.json()
        assert body["first"]["filename"] == "report_1-2.pdf"
        assert body["first"]["total_pages"] == 2
        assert body["second"]["filename"] == "report_3-3.pdf"
        assert body["second"]["total_pages"] == 1

    def test_split_invalid(self, client, uploaded):
        response = client.post(f"/documents/{uploaded['id']}/split", json={"split_page": 3})

        assert response.status_code == 400
        assert "between 1 and 2" in response.json()["detail"]

    def test_insert_image(self, client, uploaded, sample_jpeg):
        response = client.post(
            f"/documents/{uploaded['id']}/pages",
            files={"file": ("photo.jpg", sample_jpeg, "image/jpeg")},
            params={"after": 3}
        )

        assert response.status_code == 200
        assert response.json()["total_pages"] == 4

    def test_insert_unsupported(self, client, uploaded):
        response = client.post(
            f"/documents/{uploaded['id']}/pages",
            files={"file": ("notes.txt", b"hello", "text/plain")}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Unsupported file type for adding page."

    def test_remove(self, client, uploaded, labels_of):
        response = client.delete(f"/documents/{uploaded['id']}/pages/2")

        assert response.status_code == 200
        assert response.json()["total_pages"] == 2
        content = client.get(f"/documents/{uploaded['id']}/download").content
        assert labels_of(content) == ["Page 1", "Page 3"]

    def test_remove_only_page(self, client, single_page_pdf):
        doc = client.post(
            "/documents", files={"file": ("one.pdf", single_page_pdf, "application/pdf")}
        ).json()

        response = client.delete(f"/documents/{doc['id']}/pages/1")

        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot remove the only page of a document."
        assert client.get(f"/documents/{doc['id']}").json()["total_pages"] == 1

    def test_busy_document(self, client, uploaded):
        with processing_guard.hold(uploaded["id"]):
            assert client.get(f"/documents/{uploaded['id']}").json()["is_processing"] is True
            response = client.delete(f"/documents/{uploaded['id']}/pages/1")

        assert response.status_code == 409
        assert client.get(f"/documents/{uploaded['id']}").json()["total_pages"] == 3


class TestAnnotations:

    def test_drawing(self, client, uploaded, image_factory):
        drawing = image_factory('PNG', size=(918, 1188), color=(0, 0, 255, 100), mode='RGBA')
        data_url = "data:image/png;base64," + base64.b64encode(drawing).decode()
        client.put(f"/documents/{uploaded['id']}/tool", json={"tool": "draw"})

        response = client.post(f"/documents/{uploaded['id']}/pages/1/drawing", json={"data_url": data_url})

        assert response.status_code == 200
        assert response.json()["active_tool"] == "view"

    def test_drawing_not_png(self, client, uploaded, sample_jpeg):
        data_url = "data:image/jpeg;base64," + base64.b64encode(sample_jpeg).decode()

        response = client.post(f"/documents/{uploaded['id']}/pages/1/drawing", json={"data_url": data_url})

        assert response.status_code == 400

    def test_extract_and_edit_text(self, client, uploaded):
        doc_id = uploaded["id"]

        extracted = client.post(f"/documents/{doc_id}/pages/1/extract-text")
        assert extracted.status_code == 200
        body = extracted.json()
        assert body["render_scale"] == 1.5
        assert [b["text"] for b in body["blocks"]] == ["Hello", "World"]
        assert body["blocks"][0]["bounding_box"] == {"x": 108, "y": 90, "width": 150, "height": 30}

        stored = client.get(f"/documents/{doc_id}/pages/1/text-blocks").json()
        assert [b["id"] for b in stored] == [b["id"] for b in body["blocks"]]

        first_id = body["blocks"][0]["id"]
        response = client.post(f"/documents/{doc_id}/pages/1/text-edits", json={"edits": {first_id: "Hi"}})

        assert response.status_code == 200
        assert response.json()["active_tool"] == "view"
        # content changed, so the old blocks are gone
        assert client.get(f"/documents/{doc_id}/pages/1/text-blocks").json() == []

    def test_extract_failure(self, client, uploaded, ai_client_factory):
        app.dependency_overrides[get_ai_client] = lambda: ai_client_factory(error=RuntimeError("down"))

        response = client.post(f"/documents/{uploaded['id']}/pages/1/extract-text")

        assert response.status_code == 502
        assert "Failed to extract text" in response.json()["detail"]


def test_root(client):
    assert client.get("/").json()["name"] == "PDF Editor API"


class TestJsonLogging:
    """Requests must not break when logs go through the JSON formatter."""

    def test_upload(self, json_logging, client, sample_pdf, test_db_session):
        response = client.post("/documents", files={"file": ("report.pdf", sample_pdf, "application/pdf")})

        assert response.status_code == 200
        assert response.json()["filename"] == "report.pdf"
        assert [d["id"] for d in client.get("/documents").json()] == [response.json()["id"]]

    def test_broken_upload_is_input_error(self, json_logging, client):
        response = client.post(
            "/documents", files={"file": ("broken.pdf", b"%PDF-1.4 broken", "application/pdf")}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Failed to load PDF. Please try another file."
        assert client.get("/documents").json() == []
