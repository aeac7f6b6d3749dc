"""Factory pattern for creating LLM client instances."""

import logging

from veltri.adapters.llm.base import AbstractLLMClient
from veltri.adapters.llm.offline import OfflineLLMClient
from veltri.adapters.llm.openai_client import OpenAIClient
from veltri.core.config import LLMSettings, settings
from veltri.core.errors import LLMAppError

logger = logging.getLogger(__name__)

NVIDIA_BASE_URL = "https://integrate.api.nvidia.com/v1"

# provider -> default base URL (None means the SDK default)
PROVIDER_BASE_URLS: dict[str, str | None] = {
    "nvidia": NVIDIA_BASE_URL,
    "openai": None,
}


def create_llm_client(llm_settings: LLMSettings | None = None) -> AbstractLLMClient:
    """Instantiate the text-generation client for the configured provider.

    A missing API key is not an error: the offline client is returned and
    every AI text operation answers with its local fallback.

    Args:
        llm_settings: Optional override; defaults to global settings.

    Returns:
        AbstractLLMClient: Configured client instance.

    Raises:
        LLMAppError: If the provider name is unknown.
    """
    cfg = llm_settings or settings.llm
    provider = cfg.provider.lower()

    if provider not in PROVIDER_BASE_URLS:
        raise LLMAppError(
            code="llm_unknown_provider",
            message=(
                f"Unknown LLM provider: '{provider}'. "
                f"Supported providers: {', '.join(sorted(PROVIDER_BASE_URLS))}"
            ),
        )

    if not cfg.api_key:
        logger.warning("llm.offline", extra={"provider": provider})
        return OfflineLLMClient()

    return OpenAIClient(
        api_key=cfg.api_key,
        model=cfg.model,
        base_url=cfg.base_url or PROVIDER_BASE_URLS[provider],
        timeout_seconds=cfg.timeout_seconds,
    )
