"""Tests for the HTTP API."""

import pytest
import requests
from fastapi.testclient import TestClient

from app.api import routes
from app.config import settings
from app.main import app


@pytest.fixture
def client():
    return TestClient(app)


class TestSeoEndpoints:
    def test_analyze(self, client):
        resp = client.post("/api/seo/analyze", json={"html": "<html><body><h1>Hi</h1></body></html>"})
        assert resp.status_code == 200

        data = resp.json()
        assert data["score"] == 16
        assert {"add-title", "add-meta-description", "add-viewport"} <= {
            issue["fix"] for issue in data["issues"]
        }
        assert data["meta"]["heading_structure"] == ["H1: Hi"]

    def test_fix_computes_analysis_when_missing(self, client):
        resp = client.post("/api/seo/fix", json={"html": "<html><body><h1>Hi</h1></body></html>"})
        assert resp.status_code == 200

        data = resp.json()
        assert "<title>Hi</title>" in data["html"]
        assert data["after"]["score"] > data["before"]["score"]
        assert not [i for i in data["after"]["issues"] if i["fix"]]

    def test_fix_uses_given_analysis(self, client):
        analysis = {
            "score": 97,
            "issues": [
                {"type": "warning", "category": "Accessibility", "message": "lang", "fix": "add-lang"},
            ],
            "meta": {},
        }
        resp = client.post("/api/seo/fix", json={"html": "<p>x</p>", "analysis": analysis})
        assert resp.status_code == 200

        data = resp.json()
        assert 'lang="en"' in data["html"]
        assert "<title>" not in data["html"]

    def test_analyze_url(self, client, monkeypatch):
        monkeypatch.setattr(routes, "fetch_html", lambda url: "<html><body><h1>Remote</h1></body></html>")
        resp = client.post("/api/seo/analyze-url", json={"url": "https://example.com"})
        assert resp.status_code == 200
        assert resp.json()["meta"]["heading_structure"] == ["H1: Remote"]

    def test_analyze_url_fetch_error(self, client, monkeypatch):
        def fail(url):
            raise requests.ConnectionError("unreachable")

        monkeypatch.setattr(routes, "fetch_html", fail)
        resp = client.post("/api/seo/analyze-url", json={"url": "https://example.invalid"})
        assert resp.status_code == 502

    def test_analyze_url_rejects_non_http_scheme(self, client):
        resp = client.post("/api/seo/analyze-url", json={"url": "file:///etc/passwd"})
        assert resp.status_code == 400

    def test_analyze_url_oversized_page(self, client, monkeypatch):
        def too_big(url):
            raise routes.PageTooLargeError("Page is larger than 10 bytes")

        monkeypatch.setattr(routes, "fetch_html", too_big)
        resp = client.post("/api/seo/analyze-url", json={"url": "https://example.com"})
        assert resp.status_code == 413

    def test_too_large(self, client, monkeypatch):
        monkeypatch.setattr(settings, "max_html_chars", 10)
        resp = client.post("/api/seo/analyze", json={"html": "<p>" + "x" * 50 + "</p>"})
        assert resp.status_code == 413


class TestOtherEndpoints:
    def test_extract(self, client, landing_page_html):
        resp = client.post("/api/components/extract", json={"html": landing_page_html})
        assert resp.status_code == 200

        data = resp.json()
        assert [c["name"] for c in data][:3] == ["Header 1", "Navigation 1", "Hero Section 1"]
        assert all(c["id"] for c in data)

    def test_metadata(self, client):
        resp = client.post("/api/metadata", json={"html": "<title>Docs</title>"})
        assert resp.json() == {"title": "Docs", "description": "", "favicon": ""}

    def test_preview(self, client):
        resp = client.post("/api/preview", json={"html": "<p>x</p>"})
        assert resp.json()["html"].startswith('<meta http-equiv="Content-Security-Policy"')

        trusted = client.post("/api/preview", json={"html": "<p>x</p>", "is_trusted": True})
        assert trusted.json()["html"] == "<p>x</p>"

    def test_audit(self, client, landing_page_html):
        resp = client.post("/api/audit", json={"html": landing_page_html})
        assert resp.status_code == 200

        data = resp.json()
        assert data["fixed_analysis"]["score"] > data["analysis"]["score"]
        assert len(data["components"]) == 7
        assert data["progress_messages"][-1].startswith("[extractor] done")
