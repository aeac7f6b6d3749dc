"""Factory for the detection client."""

import logging

from veltri.adapters.detection.base import AbstractDetectionClient
from veltri.adapters.detection.huggingface import HuggingFaceDetectionClient
from veltri.core.config import DetectionSettings, settings

logger = logging.getLogger(__name__)


def create_detection_client(
    detection_settings: DetectionSettings | None = None,
) -> AbstractDetectionClient | None:
    """Build the Hugging Face client, or None when no token is configured."""
    cfg = detection_settings or settings.detection
    if not cfg.api_token:
        logger.warning("detection.not_configured")
        return None
    return HuggingFaceDetectionClient(
        api_token=cfg.api_token,
        model_id=cfg.model_id,
        base_url=cfg.base_url,
        timeout_seconds=cfg.timeout_seconds,
    )
