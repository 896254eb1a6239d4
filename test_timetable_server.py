import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

import timetable_server
from timetable_errors import RenderError
from timetable_server import app

SAMPLE = Path(__file__).parent / "semester_plan.sample.json"

client = TestClient(app)


def _sample_body():
    return json.loads(SAMPLE.read_text(encoding="utf-8"))


def test_generate_pdf_endpoint():
    response = client.post("/generate-pdf", json=_sample_body())

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == 'attachment; filename="semester_plan.pdf"'
    assert response.content.startswith(b"%PDF")


def test_empty_terms_is_bad_request():
    body = _sample_body()
    body["terms"] = []
    response = client.post("/generate-pdf", json=body)

    assert response.status_code == 400
    assert "no terms" in response.json()["detail"]


def test_sunday_only_is_bad_request():
    body = _sample_body()
    body["terms"] = [{"name": "X", "id": "1", "start": "2024-01-14T09:00:00", "finish": "2024-01-14T10:00:00", "rooms": ""}]
    response = client.post("/generate-pdf", json=body)
    assert response.status_code == 400


def test_degenerate_hours_is_bad_request():
    body = _sample_body()
    body["terms"] = [{"name": "X", "id": "1", "start": "2024-01-08T09:00:00", "finish": "2024-01-08T09:00:00", "rooms": ""}]
    response = client.post("/generate-pdf", json=body)
    assert response.status_code == 400


def test_schema_error_is_unprocessable():
    body = _sample_body()
    del body["course"]
    response = client.post("/generate-pdf", json=body)
    assert response.status_code == 422


def test_render_failure_is_server_error(monkeypatch):
    def _fail(*args, **kwargs):
        raise RenderError("could not finalize document")

    monkeypatch.setattr(timetable_server, "render_semester_plan", _fail)
    response = client.post("/generate-pdf", json=_sample_body())
    assert response.status_code == 500


def test_sample_input(monkeypatch):
    monkeypatch.setattr(timetable_server.settings, "sample_input_path", str(SAMPLE))
    response = client.get("/sample_input")

    assert response.status_code == 200
    assert response.json() == _sample_body()


def test_sample_input_missing(monkeypatch, tmp_path):
    monkeypatch.setattr(timetable_server.settings, "sample_input_path", str(tmp_path / "nope.json"))
    response = client.get("/sample_input")
    assert response.status_code == 404
