"""Interface for AI-generated text classifiers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class AbstractDetectionClient(ABC):
    """Sends text to a hosted classifier and returns its raw label scores."""

    model_id: str

    @abstractmethod
    async def classify(self, text: str) -> list[Any]:
        """Classify ``text``.

        Args:
            text: Trimmed, non-empty note text.

        Returns:
            The provider's JSON array of label/score candidates, unparsed.

        Raises:
            DetectionAppError: If the provider rejects every attempt.
        """
        raise NotImplementedError
