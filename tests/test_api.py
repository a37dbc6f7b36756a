"""
API Endpoint Tests

Integration tests for REST API endpoints using FastAPI TestClient with the
inference capability faked.

Test Categories:
1. TestModerateEndpoint - /api/moderate success paths
2. TestModerateValidation - validation failures (400)
3. TestModerateFailures - inference failures (500)
4. TestHealthEndpoint - /health and / endpoints
5. TestCors - preflight and CORS headers
6. TestErrorHandling - unknown routes and methods
"""

import pytest
from unittest.mock import MagicMock, patch

from aimod.exceptions import InferenceError

from tests.fixtures import (
    CLASSIFICATION_MODEL,
    LONG_TEXT,
    SENTIMENT_MODEL,
    SHORT_TEXT,
    SUMMARIZATION_MODEL,
)


def _payloads_for(fake_invoke, model_id):
    return [call.args[1] for call in fake_invoke.call_args_list if call.args[0] == model_id]


class TestModerateEndpoint:
    """Tests for successful /api/moderate requests."""

    def test_moderate_all_features_long_text(self, test_client):
        """Long text with default features runs all three features."""
        response = test_client.post("/api/moderate", json={"text": LONG_TEXT})

        assert response.status_code == 200
        body = response.json()

        assert body["success"] is True
        data = body["data"]
        assert data["text"] == LONG_TEXT
        assert set(data.keys()) == {"text", "sentiment", "classification", "summarization"}

    def test_moderate_response_structure(self, test_client):
        """Results use the camelCase wire schema."""
        response = test_client.post("/api/moderate", json={"text": LONG_TEXT})

        data = response.json()["data"]

        assert data["sentiment"] == {"label": "POSITIVE", "score": 0.9877, "confidence": 99}
        assert data["classification"] == {
            "category": "social",
            "confidence": 0.9,
            "isSpam": False,
        }
        assert data["summarization"] == {
            "summary": "The council postponed the parking vote.",
            "originalLength": len(LONG_TEXT),
            "summaryLength": len("The council postponed the parking vote."),
        }

    def test_moderate_metadata(self, test_client):
        """Metadata carries timestamp, processing time and selected features."""
        response = test_client.post("/api/moderate", json={"text": LONG_TEXT})

        metadata = response.json()["metadata"]

        assert metadata["features"] == ["sentiment", "classification", "summarization"]
        assert metadata["processingTime"] >= 0
        assert metadata["timestamp"].endswith("Z")

    def test_processing_time_from_orchestrator(self, test_client):
        """processingTime is the orchestrator's measured run time."""
        clock = MagicMock()
        clock.perf_counter.side_effect = [10.0, 10.25]

        with patch("aimod.orchestrator.time", clock):
            response = test_client.post("/api/moderate", json={"text": SHORT_TEXT})

        assert response.json()["metadata"]["processingTime"] == 250

    def test_short_text_skips_summarization(self, test_client, fake_invoke):
        """Texts of 500 characters or less are never summarized."""
        response = test_client.post("/api/moderate", json={"text": SHORT_TEXT})

        assert response.status_code == 200
        data = response.json()["data"]
        assert "summarization" not in data
        assert "sentiment" in data
        assert "classification" in data
        assert _payloads_for(fake_invoke, SUMMARIZATION_MODEL) == []

    def test_exact_threshold_skips_summarization(self, test_client):
        """A 500-character text is not summarized."""
        response = test_client.post("/api/moderate", json={"text": "a" * 500})

        assert "summarization" not in response.json()["data"]

    def test_single_feature(self, test_client, fake_invoke):
        """Only the requested feature runs."""
        response = test_client.post(
            "/api/moderate", json={"text": LONG_TEXT, "features": ["sentiment"]}
        )

        assert response.status_code == 200
        body = response.json()
        assert set(body["data"].keys()) == {"text", "sentiment"}
        assert body["metadata"]["features"] == ["sentiment"]
        assert fake_invoke.await_count == 1

    def test_all_sentinel_expands(self, test_client):
        """'all' selects every feature even alongside other names."""
        response = test_client.post(
            "/api/moderate", json={"text": LONG_TEXT, "features": ["classification", "all"]}
        )

        body = response.json()
        assert body["metadata"]["features"] == ["sentiment", "classification", "summarization"]
        assert "all" not in body["metadata"]["features"]

    def test_empty_features_selects_all(self, test_client):
        """An empty feature list behaves like an omitted one."""
        response = test_client.post("/api/moderate", json={"text": LONG_TEXT, "features": []})

        assert response.json()["metadata"]["features"] == [
            "sentiment",
            "classification",
            "summarization",
        ]

    def test_max_length_reaches_summarization(self, test_client, fake_invoke):
        """options.maxLength is passed to the summarization model."""
        response = test_client.post(
            "/api/moderate",
            json={"text": LONG_TEXT, "features": ["summarization"], "options": {"maxLength": 80}},
        )

        assert response.status_code == 200
        payloads = _payloads_for(fake_invoke, SUMMARIZATION_MODEL)
        assert payloads == [{"input_text": LONG_TEXT, "max_length": 80}]

    def test_default_summary_length(self, test_client, fake_invoke):
        """Without maxLength the default limit of 150 is used."""
        test_client.post("/api/moderate", json={"text": LONG_TEXT})

        payloads = _payloads_for(fake_invoke, SUMMARIZATION_MODEL)
        assert payloads[0]["max_length"] == 150

    def test_unknown_options_are_ignored(self, test_client):
        """Extra option keys do not fail the request."""
        response = test_client.post(
            "/api/moderate",
            json={"text": SHORT_TEXT, "options": {"includeScores": True, "threshold": 0.7}},
        )

        assert response.status_code == 200

    def test_success_not_cached(self, test_client):
        """Success responses disable caching."""
        response = test_client.post("/api/moderate", json={"text": SHORT_TEXT})

        assert response.headers["cache-control"] == "no-cache"


class TestModerateValidation:
    """Tests for validation failures on /api/moderate."""

    def test_missing_text(self, test_client):
        """Missing text field returns MISSING_TEXT."""
        response = test_client.post("/api/moderate", json={})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "MISSING_TEXT"
        assert "timestamp" in body

    def test_non_string_text(self, test_client):
        """Non-string text returns MISSING_TEXT."""
        response = test_client.post("/api/moderate", json={"text": 12345678901})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "MISSING_TEXT"

    def test_text_too_short(self, test_client):
        """Five characters is below the minimum."""
        response = test_client.post("/api/moderate", json={"text": "short"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "TEXT_TOO_SHORT"

    def test_text_too_long(self, test_client):
        """More than 5000 characters is rejected."""
        response = test_client.post("/api/moderate", json={"text": "x" * 5001})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "TEXT_TOO_LONG"

    def test_length_bounds_inclusive(self, test_client):
        """Exactly 10 and exactly 5000 characters are accepted."""
        assert test_client.post("/api/moderate", json={"text": "x" * 10}).status_code == 200
        assert test_client.post("/api/moderate", json={"text": "x" * 5000}).status_code == 200

    def test_invalid_json(self, test_client):
        """Unparseable body returns INVALID_REQUEST."""
        response = test_client.post(
            "/api/moderate", content="not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_body_not_object(self, test_client):
        """A JSON array body returns INVALID_REQUEST."""
        response = test_client.post("/api/moderate", json=["text"])

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_unknown_feature(self, test_client):
        """Unknown feature names return INVALID_REQUEST."""
        response = test_client.post(
            "/api/moderate", json={"text": SHORT_TEXT, "features": ["toxicity"]}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    @pytest.mark.parametrize("entry", [["sentiment"], {"a": 1}])
    def test_non_string_feature_entry(self, test_client, entry):
        """Nested lists or objects in features are a client error."""
        response = test_client.post(
            "/api/moderate", json={"text": SHORT_TEXT, "features": [entry]}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_invalid_max_length(self, test_client):
        """Non-positive maxLength returns INVALID_REQUEST."""
        response = test_client.post(
            "/api/moderate", json={"text": SHORT_TEXT, "options": {"maxLength": 0}}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_validation_failure_skips_inference(self, test_client, fake_invoke):
        """Rejected requests never reach the models."""
        test_client.post("/api/moderate", json={"text": "short"})

        assert fake_invoke.await_count == 0


class TestModerateFailures:
    """Tests for inference failures on /api/moderate."""

    def test_inference_error_returns_ai_error(self, test_client, model_responses):
        """A failing model call fails the whole request with AI_ERROR."""
        model_responses[CLASSIFICATION_MODEL] = InferenceError(
            CLASSIFICATION_MODEL, "upstream returned 503"
        )

        response = test_client.post("/api/moderate", json={"text": LONG_TEXT})

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "AI_ERROR"
        assert "upstream returned 503" in body["error"]["details"]["originalError"]
        assert "data" not in body

    def test_non_ai_error_returns_internal_error(self, test_client, model_responses):
        """An unusable sentiment response is an INTERNAL_ERROR."""
        model_responses[SENTIMENT_MODEL] = "not a record"

        response = test_client.post("/api/moderate", json={"text": SHORT_TEXT})

        assert response.status_code == 500
        body = response.json()
        assert body["error"]["code"] == "INTERNAL_ERROR"
        assert body["error"]["message"] == "An unexpected error occurred"
        assert "data" not in body

    def test_classification_garbage_is_not_an_error(self, test_client, model_responses):
        """Unparseable classification output degrades to the keyword fallback."""
        model_responses[CLASSIFICATION_MODEL] = {"response": "this is spam content"}

        response = test_client.post(
            "/api/moderate", json={"text": SHORT_TEXT, "features": ["classification"]}
        )

        assert response.status_code == 200
        assert response.json()["data"]["classification"] == {
            "category": "spam",
            "confidence": 0.6,
            "isSpam": True,
        }


class TestHealthEndpoint:
    """Tests for /health and / endpoints."""

    def test_health_returns_status(self, test_client):
        """Health endpoint reports healthy with version."""
        response = test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert "timestamp" in data

    def test_root_is_health_check(self, test_client):
        """Root path answers like /health."""
        response = test_client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestCors:
    """Tests for CORS handling."""

    def test_preflight(self, test_client):
        """OPTIONS returns 204 with a permissive origin."""
        response = test_client.options("/api/moderate")

        assert response.status_code == 204
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-max-age"] == "86400"
        assert "POST" in response.headers["access-control-allow-methods"]

    def test_cors_headers_on_success(self, test_client):
        """Regular responses carry CORS headers."""
        response = test_client.get("/health")

        assert response.headers["access-control-allow-origin"] == "*"

    def test_cors_headers_on_error(self, test_client):
        """Error responses carry CORS headers."""
        response = test_client.post("/api/moderate", json={})

        assert response.headers["access-control-allow-origin"] == "*"


class TestErrorHandling:
    """Tests for unknown routes and wrong methods."""

    def test_not_found_endpoint(self, test_client):
        """Unknown path returns 404 INVALID_REQUEST."""
        response = test_client.get("/unknown")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "INVALID_REQUEST"
        assert "/unknown" in body["error"]["message"]

    def test_wrong_method(self, test_client):
        """GET on the moderation route returns INVALID_REQUEST."""
        response = test_client.get("/api/moderate")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_docs_disabled_outside_debug(self, test_client):
        """Interactive docs are not exposed unless debug is enabled."""
        response = test_client.get("/docs")

        assert response.status_code == 404
