"""Tests for AI-text detection: label parsing, provider retries and service checks."""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from veltri.adapters.detection.factory import create_detection_client
from veltri.adapters.detection.huggingface import HuggingFaceDetectionClient, candidate_inputs
from veltri.core.config import DetectionSettings
from veltri.core.errors import DetectionAppError, ValidationAppError
from veltri.services.detection_service import (
    DetectionService,
    LabelScore,
    build_verdict,
    normalize_label,
    parse_candidates,
)

MODEL_ID = "fakespot-ai/roberta-base-ai-text-detection-v1"
NOTE = "The mitochondria is the powerhouse of the cell. " * 60


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("FAKE", "AI-generated"),
        ("ai", "AI-generated"),
        ("LABEL_1", "AI-generated"),
        ("Real", "Human-written"),
        ("human", "Human-written"),
        ("LABEL_0", "Human-written"),
        ("neutral", "neutral"),
    ],
)
def test_normalize_label(raw: str, expected: str) -> None:
    assert normalize_label(raw) == expected


class TestParseCandidates:
    def test_flat_shape(self) -> None:
        payload = [{"label": "FAKE", "score": 0.9}, {"label": "REAL", "score": 0.1}]

        assert parse_candidates(payload) == [LabelScore("FAKE", 0.9), LabelScore("REAL", 0.1)]

    def test_nested_shape(self) -> None:
        payload = [[{"label": "REAL", "score": 0.7}, {"label": "FAKE", "score": 0.3}]]

        assert parse_candidates(payload)[0] == LabelScore("REAL", 0.7)

    def test_drops_non_finite_scores(self) -> None:
        payload = [{"label": "FAKE", "score": "nan"}, {"label": "REAL", "score": 0.4}]

        assert parse_candidates(payload) == [LabelScore("REAL", 0.4)]

    @pytest.mark.parametrize("payload", [[], {"label": "x"}, ["text"], [{"label": "only"}]])
    def test_unrecognized_shapes(self, payload) -> None:
        assert parse_candidates(payload) == []


def test_build_verdict_picks_highest_score() -> None:
    verdict = build_verdict(MODEL_ID, [LabelScore("REAL", 0.126), LabelScore("FAKE", 0.874)])

    assert verdict.label == "AI-generated"
    assert verdict.is_likely_ai is True
    assert verdict.score == 0.874
    assert verdict.summary == "AI-generated (87% confidence)"


def test_build_verdict_without_candidates() -> None:
    with pytest.raises(DetectionAppError) as exc_info:
        build_verdict(MODEL_ID, [])

    assert exc_info.value.code == "detection_bad_response"


def test_candidate_inputs_deduplicates_short_text() -> None:
    assert candidate_inputs("short") == ["short"]
    assert [len(x) for x in candidate_inputs("a" * 2000)] == [1800, 1200, 900, 700]
    assert [len(x) for x in candidate_inputs("a" * 1000)] == [1000, 900, 700]


def _client(handler) -> HuggingFaceDetectionClient:
    return HuggingFaceDetectionClient(
        api_token="hf-token",
        model_id=MODEL_ID,
        base_url="https://hf.test/models",
        transport=httpx.MockTransport(handler),
    )


class TestHuggingFaceClient:
    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[{"label": "REAL", "score": 0.8}])

        payload = await _client(handler).classify(NOTE)

        assert payload == [{"label": "REAL", "score": 0.8}]
        assert len(seen) == 1
        assert seen[0].headers["Authorization"] == "Bearer hf-token"
        assert str(seen[0].url) == f"https://hf.test/models/{MODEL_ID}"
        assert len(json.loads(seen[0].content)["inputs"]) == 1800

    @pytest.mark.asyncio
    async def test_tries_encoded_endpoint_then_shorter_input_on_size_error(self) -> None:
        attempts: list[tuple[str, int]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            size = len(json.loads(request.content)["inputs"])
            attempts.append((request.url.raw_path.decode(), size))
            if size > 900:
                return httpx.Response(400, text="The size of tensor a (600) must match")
            return httpx.Response(200, json=[[{"label": "FAKE", "score": 0.6}]])

        payload = await _client(handler).classify(NOTE)

        assert payload == [[{"label": "FAKE", "score": 0.6}]]
        assert [size for _, size in attempts] == [1800, 1800, 1200, 1200, 900]
        assert "%2F" in attempts[1][0]

    @pytest.mark.asyncio
    async def test_other_errors_do_not_retry_shorter_input(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503, text="Model is loading" + "." * 500)

        with pytest.raises(DetectionAppError) as exc_info:
            await _client(handler).classify(NOTE)

        assert len(calls) == 2
        error = exc_info.value
        assert error.code == "detection_provider_error"
        assert error.message.startswith("Hugging Face inference failed (503): Model is loading")
        assert len(error.message) < 300
        assert error.details["provider_status"] == 503

    @pytest.mark.asyncio
    async def test_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        with pytest.raises(DetectionAppError) as exc_info:
            await _client(handler).classify(NOTE)

        assert "ConnectError" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_success_with_non_list_payload(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"error": "unexpected"})

        with pytest.raises(DetectionAppError) as exc_info:
            await _client(handler).classify(NOTE)

        assert exc_info.value.code == "detection_bad_response"


class TestDetectionService:
    @pytest.mark.asyncio
    async def test_detect(self) -> None:
        client = MagicMock()
        client.model_id = MODEL_ID
        client.classify = AsyncMock(return_value=[{"label": "LABEL_0", "score": 0.96}])

        result = await DetectionService(client).detect(f"  {NOTE}  ")

        assert result.label == "Human-written"
        assert result.is_likely_ai is False
        assert result.summary == "Human-written (96% confidence)"
        client.classify.assert_awaited_once_with(NOTE.strip())

    @pytest.mark.asyncio
    async def test_short_content_rejected_before_provider(self) -> None:
        client = MagicMock()
        client.classify = AsyncMock()

        with pytest.raises(ValidationAppError) as exc_info:
            await DetectionService(client).detect("   too short   ")

        assert exc_info.value.code == "content_too_short"
        client.classify.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_not_configured(self) -> None:
        with pytest.raises(DetectionAppError) as exc_info:
            await DetectionService(None).detect(NOTE)

        assert exc_info.value.code == "detection_not_configured"
        assert exc_info.value.details["http_status"] == 500


def test_factory_requires_token() -> None:
    assert create_detection_client(DetectionSettings(api_token=None)) is None

    client = create_detection_client(DetectionSettings(api_token="hf"))
    assert isinstance(client, HuggingFaceDetectionClient)
    assert client.model_id == MODEL_ID
