"""Hugging Face inference router adapter for AI-text detection.

Some classifier deployments reject long inputs with tensor size errors, so
the client retries with progressively shorter prefixes of the note, but
only for that specific failure.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

from veltri.adapters.detection.base import AbstractDetectionClient
from veltri.core.errors import DetectionAppError

logger = logging.getLogger(__name__)

INPUT_PREFIX_LENGTHS = (1800, 1200, 900, 700)
SIZE_ERROR_MARKERS = ("tensor", "target sizes", "size mismatch")
ERROR_BODY_CHARS = 220


def candidate_inputs(text: str) -> list[str]:
    """Prefixes of ``text`` to try, longest first, without duplicates."""
    prefixes = (text[:n] for n in INPUT_PREFIX_LENGTHS)
    return list(dict.fromkeys(p for p in prefixes if p))


def _decode(response: httpx.Response) -> Any:
    try:
        return response.json()
    except json.JSONDecodeError:
        return response.text


def _is_size_error(response: httpx.Response) -> bool:
    body = response.text.lower()
    return response.status_code == 400 and any(marker in body for marker in SIZE_ERROR_MARKERS)


class HuggingFaceDetectionClient(AbstractDetectionClient):
    """Calls a text-classification model through the inference router."""

    def __init__(
        self,
        api_token: str,
        model_id: str,
        base_url: str = "https://router.huggingface.co/hf-inference/models",
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_token = api_token
        self.model_id = model_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout_seconds
        self._transport = transport

    def endpoints(self) -> list[str]:
        """Model URLs to try: raw model id first, then fully URL-encoded."""
        return list(
            dict.fromkeys(
                [
                    f"{self.base_url}/{self.model_id}",
                    f"{self.base_url}/{quote(self.model_id, safe='')}",
                ]
            )
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={"Authorization": f"Bearer {self.api_token}"},
        )

    async def classify(self, text: str) -> list[Any]:
        last_error = "Unknown inference error"
        last_status: int | None = None

        async with self._client() as client:
            for input_text in candidate_inputs(text):
                try_shorter = False

                for endpoint in self.endpoints():
                    try:
                        response = await client.post(endpoint, json={"inputs": input_text})
                    except httpx.HTTPError as exc:
                        try_shorter = False
                        last_status = None
                        last_error = f"Hugging Face inference request failed: {type(exc).__name__}"
                        continue

                    if response.is_success:
                        payload = _decode(response)
                        if not isinstance(payload, list):
                            raise DetectionAppError(
                                code="detection_bad_response",
                                message="Unexpected Hugging Face response format",
                                details={"model": self.model_id},
                            )
                        logger.debug(
                            "detection.classified",
                            extra={"model": self.model_id, "input_chars": len(input_text)},
                        )
                        return payload

                    try_shorter = _is_size_error(response)
                    last_status = response.status_code
                    last_error = (
                        f"Hugging Face inference failed ({response.status_code}): "
                        f"{response.text[:ERROR_BODY_CHARS]}"
                    )

                if not try_shorter:
                    break
                logger.info(
                    "detection.retry_shorter_input",
                    extra={"model": self.model_id, "input_chars": len(input_text)},
                )

        logger.warning(
            "detection.failed",
            extra={"model": self.model_id, "provider_status": last_status},
        )
        details = {"model": self.model_id}
        if last_status is not None:
            details["provider_status"] = last_status
        raise DetectionAppError(
            code="detection_provider_error",
            message=last_error,
            details=details,
        )
