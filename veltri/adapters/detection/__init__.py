"""AI-generated text detection adapters."""

from veltri.adapters.detection.base import AbstractDetectionClient
from veltri.adapters.detection.factory import create_detection_client
from veltri.adapters.detection.huggingface import HuggingFaceDetectionClient

__all__ = [
    "AbstractDetectionClient",
    "HuggingFaceDetectionClient",
    "create_detection_client",
]
