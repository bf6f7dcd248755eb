"""
Tests for the FastAPI surface (fetcher and narrator stubbed).
"""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from api import create_app
from backend.errors import AnalysisServiceError
from tests.test_analyze import CONCENTRATED, StubFetcher, StubNarrator


class ExplodingFetcher:
    def get_token_info(self, contract_id):
        raise RuntimeError("unexpected")


def _client(settings, fetcher=None, narrator=None) -> TestClient:
    return TestClient(create_app(settings, fetcher=fetcher or StubFetcher(CONCENTRATED), narrator=narrator))


class TestCheckContract:
    def test_success_shape(self, settings):
        resp = _client(settings).post("/api/check-contract", json={"contractId": "token.near"})
        assert resp.status_code == 200
        body = resp.json()
        assert set(body) == {"analysis", "risk_score", "data"}
        assert body["risk_score"] == 3
        assert body["analysis"]["overallRisk"] == "MEDIUM"
        assert body["analysis"]["riskFactors"][0]["type"] == "HOLDER_CONCENTRATION"
        assert body["data"]["holders"][0]["percentage"] == 60.0

    @pytest.mark.parametrize("payload", [{}, {"contractId": ""}, {"contractId": "   "}, {"contractId": None}])
    def test_missing_contract_id_is_400(self, settings, payload):
        resp = _client(settings).post("/api/check-contract", json=payload)
        assert resp.status_code == 400
        assert resp.json()["error"] == "Contract ID is required"

    def test_non_json_body_is_400(self, settings):
        resp = _client(settings).post("/api/check-contract", content=b"not json",
                                      headers={"Content-Type": "application/json"})
        assert resp.status_code == 400
        assert "error" in resp.json()

    def test_internal_error_is_500_with_safe_shape(self, settings):
        resp = _client(settings, fetcher=ExplodingFetcher()).post(
            "/api/check-contract", json={"contractId": "token.near"})
        assert resp.status_code == 500
        body = resp.json()
        assert body["error"] == "Failed to analyze contract"
        assert body["details"] == "unexpected"
        assert body["contractId"] == "token.near"
        assert body["analysis"]["overallRisk"] == "ERROR"
        assert body["data"] == {"tokenInfo": {}, "holders": [], "transactions": []}

    def test_degraded_ingestion_is_200(self, settings):
        degraded = {"tokenInfo": {}, "holders": [], "transactions": [], "error": "HTTP 503"}
        resp = _client(settings, fetcher=StubFetcher(degraded)).post(
            "/api/check-contract", json={"contractId": "token.near"})
        assert resp.status_code == 200
        assert resp.json()["analysis"]["overallRisk"] == "ERROR"
        assert resp.json()["data"]["error"] == "HTTP 503"


class TestNarrative:
    def test_narrative_included_when_enabled(self, narrative_settings):
        resp = _client(narrative_settings, narrator=StubNarrator()).post(
            "/api/check-contract", json={"contractId": "token.near"})
        assert resp.status_code == 200
        assert resp.json()["analysis"]["score"] == 77

    def test_narrative_opt_out(self, narrative_settings):
        resp = _client(narrative_settings, narrator=StubNarrator()).post(
            "/api/check-contract", json={"contractId": "token.near", "narrative": False})
        assert "score" not in resp.json()["analysis"]

    def test_narrative_skipped_without_key(self, settings):
        resp = _client(settings).post("/api/check-contract", json={"contractId": "token.near", "narrative": True})
        assert resp.status_code == 200
        assert "score" not in resp.json()["analysis"]

    def test_narrative_failure_is_500_with_partial_data(self, narrative_settings):
        narrator = StubNarrator(error=AnalysisServiceError("Narrative service returned HTTP 502"))
        resp = _client(narrative_settings, narrator=narrator).post(
            "/api/check-contract", json={"contractId": "token.near"})
        assert resp.status_code == 500
        body = resp.json()
        assert "502" in body["details"]
        assert body["risk_score"] == 3
        assert len(body["data"]["holders"]) == 2


class TestMisc:
    def test_health(self, settings):
        assert _client(settings).get("/api/health").json() == {"ok": True}

    def test_options_is_permissive(self, settings):
        resp = _client(settings).options("/api/check-contract")
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "*"

    def test_cors_preflight(self, settings):
        resp = _client(settings).options(
            "/api/check-contract",
            headers={"Origin": "http://example.com", "Access-Control-Request-Method": "POST"},
        )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "*"

    def test_static_page_served(self, settings):
        settings.static_dir = str(Path(__file__).resolve().parent.parent / "web")
        resp = _client(settings).get("/")
        assert resp.status_code == 200
        assert "NEAR Token Checker" in resp.text
