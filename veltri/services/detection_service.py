"""AI-generated text detection for notes.

Turns the classifier's raw label/score list into a single verdict.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from veltri.adapters.detection.base import AbstractDetectionClient
from veltri.core.errors import DetectionAppError, ValidationAppError
from veltri.schemas.ai import DetectionResponse

logger = logging.getLogger(__name__)

MIN_CONTENT_CHARS = 40

AI_LABEL = "AI-generated"
HUMAN_LABEL = "Human-written"


@dataclass(frozen=True)
class LabelScore:
    label: str
    score: float


def normalize_label(value: str) -> str:
    """Map provider labels onto 'AI-generated' / 'Human-written'.

    Unknown labels are returned unchanged.
    """
    upper = value.upper()
    if "FAKE" in upper or "AI" in upper or upper == "LABEL_1":
        return AI_LABEL
    if "REAL" in upper or "HUMAN" in upper or upper == "LABEL_0":
        return HUMAN_LABEL
    return value


def parse_candidates(payload: Any) -> list[LabelScore]:
    """Read ``[{label, score}, ...]`` or ``[[{label, score}, ...]]``.

    Candidates whose score is not a finite number are dropped.
    """
    if not isinstance(payload, list) or not payload:
        return []

    first = payload[0]
    if isinstance(first, list):
        return parse_candidates(first)
    if not (isinstance(first, dict) and "label" in first and "score" in first):
        return []

    candidates: list[LabelScore] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        label = item.get("label")
        try:
            score = float(item.get("score") or 0)
        except (TypeError, ValueError):
            continue
        if math.isfinite(score):
            candidates.append(LabelScore(label="unknown" if label is None else str(label), score=score))
    return candidates


def build_verdict(model: str, candidates: list[LabelScore]) -> DetectionResponse:
    """Pick the highest-scoring candidate and describe it."""
    if not candidates:
        raise DetectionAppError(
            code="detection_bad_response",
            message="Unexpected Hugging Face response format",
            details={"model": model},
        )

    top = max(candidates, key=lambda c: c.score)
    label = normalize_label(top.label)
    confidence = math.floor(top.score * 100 + 0.5)
    return DetectionResponse(
        model=model,
        label=label,
        score=top.score,
        is_likely_ai=label == AI_LABEL,
        summary=f"{label} ({confidence}% confidence)",
    )


class DetectionService:
    """Validates note text and asks the classifier for a verdict.

    Attributes:
        client: Detection adapter, or None when no provider token is configured.
    """

    def __init__(self, client: AbstractDetectionClient | None) -> None:
        self.client = client

    async def detect(self, content: str) -> DetectionResponse:
        """Estimate whether ``content`` was machine-written.

        Raises:
            ValidationAppError: If the content is shorter than 40 characters.
            DetectionAppError: If detection is not configured or the provider fails.
        """
        text = (content or "").strip()
        if len(text) < MIN_CONTENT_CHARS:
            raise ValidationAppError(
                code="content_too_short",
                message="Content is too short for AI detection",
                details={"min_value": MIN_CONTENT_CHARS, "actual_value": len(text)},
            )

        if self.client is None:
            raise DetectionAppError(
                code="detection_not_configured",
                message="AI detection is not configured. Set DETECTION_API_TOKEN.",
                details={"http_status": 500},
            )

        payload = await self.client.classify(text)
        verdict = build_verdict(self.client.model_id, parse_candidates(payload))
        logger.info(
            "detection.completed",
            extra={"model": verdict.model, "label": verdict.label, "score": round(verdict.score, 4)},
        )
        return verdict
