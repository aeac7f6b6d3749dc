"""Tests for the AI note API routes.

Services are patched at module level; throttling uses the isolated limiter
built by the ``client`` fixture.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from veltri.adapters.rate_limit import AbstractRateLimiter, RateLimitResult
from veltri.core.app_factory import create_app
from veltri.core.errors import DetectionAppError, ValidationAppError
from veltri.schemas.ai import (
    ChatResponse,
    DetectionResponse,
    ReviewResponse,
    SummaryResponse,
    TagsResponse,
)

NOTE = "Derivatives measure how a function changes as its input changes."


class TestAuthentication:
    @pytest.mark.parametrize("path", ["/v1/ai/tags", "/v1/ai/summary", "/v1/ai/review", "/v1/ai/detect"])
    def test_missing_api_key(self, client: TestClient, path: str) -> None:
        response = client.post(path, json={"content": NOTE})

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "forbidden"
        assert "Missing API key" in response.json()["error"]["message"]

    def test_invalid_api_key(self, client: TestClient) -> None:
        response = client.post("/v1/ai/tags", json={"content": NOTE}, headers={"X-API-Key": "nope"})

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Invalid or missing API key"

    def test_health_is_public(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["rate_limiter"]["entries"] == 0

    def test_health_with_other_limiter_backend(self) -> None:
        class AlwaysAllow(AbstractRateLimiter):
            def check(self, key: str, *, limit: int, window_seconds: int) -> RateLimitResult:
                return RateLimitResult(allowed=True, limit=limit, remaining=limit, reset_at_ms=0)

        response = TestClient(create_app(rate_limiter=AlwaysAllow())).get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "rate_limiter": {}}


class TestTags:
    @patch("veltri.api.routes.ai._note_ai_service")
    def test_success(self, mock_service, client: TestClient, valid_api_key_headers) -> None:
        mock_service.suggest_tags = AsyncMock(return_value=TagsResponse(tags=["calculus", "math"]))

        response = client.post("/v1/ai/tags", json={"content": NOTE}, headers=valid_api_key_headers)

        assert response.status_code == 200
        assert response.json() == {"tags": ["calculus", "math"], "fallback": False}
        mock_service.suggest_tags.assert_awaited_once_with(NOTE)

    @patch("veltri.api.routes.ai._note_ai_service")
    def test_empty_content(self, mock_service, client: TestClient, valid_api_key_headers) -> None:
        mock_service.suggest_tags = AsyncMock(
            side_effect=ValidationAppError(code="content_required", message="Content is required")
        )

        response = client.post(
            "/v1/ai/tags",
            json={"content": ""},
            headers={**valid_api_key_headers, "X-Request-ID": "req-1"},
        )

        assert response.status_code == 400
        assert response.json() == {
            "error": {"code": "content_required", "message": "Content is required", "request_id": "req-1"}
        }

    def test_missing_body_field(self, client: TestClient, valid_api_key_headers) -> None:
        response = client.post("/v1/ai/tags", json={}, headers=valid_api_key_headers)

        assert response.status_code == 422


class TestSummaryReviewChat:
    @patch("veltri.api.routes.ai._note_ai_service")
    def test_summary(self, mock_service, client: TestClient, valid_api_key_headers) -> None:
        mock_service.summarize = AsyncMock(return_value=SummaryResponse(summary="Short.", fallback=True))

        response = client.post("/v1/ai/summary", json={"content": NOTE}, headers=valid_api_key_headers)

        assert response.status_code == 200
        assert response.json() == {"summary": "Short.", "fallback": True}

    @patch("veltri.api.routes.ai._note_ai_service")
    def test_review(self, mock_service, client: TestClient, valid_api_key_headers) -> None:
        mock_service.review = AsyncMock(
            return_value=ReviewResponse(
                is_valid=True,
                feedback="Good.",
                grammar_score=8,
                accuracy_score=9,
                learning_value_score=7,
            )
        )

        response = client.post("/v1/ai/review", json={"content": NOTE}, headers=valid_api_key_headers)

        assert response.status_code == 200
        assert response.json()["accuracy_score"] == 9

    @patch("veltri.api.routes.ai._note_ai_service")
    def test_chat_passes_plain_messages(self, mock_service, client: TestClient, valid_api_key_headers) -> None:
        mock_service.chat = AsyncMock(return_value=ChatResponse(reply="Try an example."))
        messages = [{"role": "user", "content": "Improve my intro"}]

        response = client.post("/v1/ai/chat", json={"messages": messages}, headers=valid_api_key_headers)

        assert response.status_code == 200
        assert response.json()["reply"] == "Try an example."
        mock_service.chat.assert_awaited_once_with(messages)

    def test_chat_rejects_unknown_role(self, client: TestClient, valid_api_key_headers) -> None:
        response = client.post(
            "/v1/ai/chat",
            json={"messages": [{"role": "tool", "content": "x"}]},
            headers=valid_api_key_headers,
        )

        assert response.status_code == 422

    def test_chat_requires_messages(self, client: TestClient, valid_api_key_headers) -> None:
        response = client.post("/v1/ai/chat", json={"messages": []}, headers=valid_api_key_headers)

        assert response.status_code == 422


class TestDetect:
    @patch("veltri.api.routes.ai._detection_service")
    def test_success(self, mock_service, client: TestClient, valid_api_key_headers) -> None:
        mock_service.detect = AsyncMock(
            return_value=DetectionResponse(
                model="m",
                label="AI-generated",
                score=0.91,
                is_likely_ai=True,
                summary="AI-generated (91% confidence)",
            )
        )

        response = client.post("/v1/ai/detect", json={"content": NOTE}, headers=valid_api_key_headers)

        assert response.status_code == 200
        assert response.json()["is_likely_ai"] is True

    @patch("veltri.api.routes.ai._detection_service")
    def test_provider_failure_is_bad_gateway(self, mock_service, client: TestClient, valid_api_key_headers) -> None:
        mock_service.detect = AsyncMock(
            side_effect=DetectionAppError(
                code="detection_provider_error",
                message="Hugging Face inference failed (503): loading",
                details={"provider_status": 503},
            )
        )

        response = client.post("/v1/ai/detect", json={"content": NOTE}, headers=valid_api_key_headers)

        assert response.status_code == 502
        error = response.json()["error"]
        assert error["code"] == "detection_provider_error"
        assert error["details"] == {"provider_status": 503}

    @patch("veltri.api.routes.ai._detection_service")
    def test_not_configured_is_server_error(self, mock_service, client: TestClient, valid_api_key_headers) -> None:
        mock_service.detect = AsyncMock(
            side_effect=DetectionAppError(
                code="detection_not_configured",
                message="AI detection is not configured.",
                details={"http_status": 500},
            )
        )

        response = client.post("/v1/ai/detect", json={"content": NOTE}, headers=valid_api_key_headers)

        assert response.status_code == 500
        assert "details" not in response.json()["error"]


def test_openapi_documents_throttling(client: TestClient) -> None:
    schema = client.get("/openapi.json").json()

    assert "ApiKeyAuth" in schema["components"]["securitySchemes"]
    assert "429" in schema["paths"]["/v1/ai/detect"]["post"]["responses"]
    assert schema["paths"]["/health"]["get"]["security"] == []
