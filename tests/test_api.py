"""
API tests — report generation over HTTP and download naming.
"""

import runpy

import pytest
import uvicorn
from fastapi.testclient import TestClient

from app.controllers.report_controller import _get_file_repo
from app.main import app
from app.repository.file_repository import FileRepository
from app.services.export_service import PdfExportService

from conftest import jpeg_data_url, make_survey


def _payload(layout="three_per_page", image_count=2):
    return {
        "survey": {
            "name": "第一工区現場調査",
            "surveyDate": "2025-12-15",
            "memo": "足場の状態を確認",
            "project": {"name": "テストプロジェクトA"},
        },
        "images": [
            {
                "imageInfo": {"fileName": f"photo{i}.jpg", "width": 1920, "height": 1080},
                "dataUrl": jpeg_data_url(),
                "comment": f"コメント{i}",
            }
            for i in range(1, image_count + 1)
        ],
        "layout": layout,
    }


@pytest.fixture
def client(tmp_path):
    app.dependency_overrides[_get_file_repo] = lambda: FileRepository(tmp_path)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class TestHealth:
    def test_health(self, client):
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestCreateReport:
    @pytest.mark.parametrize("layout", ["three_per_page", "standard"])
    def test_returns_pdf(self, client, layout):
        resp = client.post("/api/v1/reports", json=_payload(layout=layout))
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert resp.content.startswith(b"%PDF")
        assert "filename*=UTF-8''" in resp.headers["content-disposition"]

    def test_session_dir_removed_after_stream(self, client, tmp_path):
        client.post("/api/v1/reports", json=_payload())
        assert list(tmp_path.iterdir()) == []

    def test_missing_survey_is_422(self, client):
        resp = client.post("/api/v1/reports", json={"images": []})
        assert resp.status_code == 422

    def test_bad_image_size_is_422(self, client):
        payload = _payload()
        payload["images"][0]["imageInfo"]["width"] = 0
        resp = client.post("/api/v1/reports", json=payload)
        assert resp.status_code == 422

    def test_unreadable_image_still_renders(self, client):
        payload = _payload()
        payload["images"][0]["dataUrl"] = "data:image/jpeg;base64,broken"
        resp = client.post("/api/v1/reports", json=payload)
        assert resp.status_code == 200


class TestDefaultFilename:
    def test_name_and_date(self):
        name = PdfExportService.default_filename(make_survey(name="現場調査A"))
        assert name == "現場調査A_20251215.pdf"

    def test_unsafe_characters_replaced(self):
        name = PdfExportService.default_filename(make_survey(name="A/B:C*?"))
        assert "/" not in name and ":" not in name
        assert name.startswith("A_B_C__")

    def test_non_iso_date_omitted(self):
        name = PdfExportService.default_filename(make_survey(name="X", survey_date="unknown"))
        assert name == "X.pdf"

    def test_full_width_digits_omitted(self):
        name = PdfExportService.default_filename(make_survey(name="X", survey_date="２０２５-１２-１５"))
        assert name == "X.pdf"


class TestServe:
    def test_main_runs_uvicorn(self, monkeypatch):
        served = {}
        monkeypatch.setattr(uvicorn, "run", lambda target, **kwargs: served.update(kwargs, target=target))
        monkeypatch.setenv("PORT", "9001")
        runpy.run_module("app.main", run_name="__main__")
        assert served["target"] == "app.main:app"
        assert served["port"] == 9001
