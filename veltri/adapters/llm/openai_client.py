"""OpenAI-compatible chat completions adapter (OpenAI, NVIDIA NIM)."""

import logging

from openai import AsyncOpenAI, OpenAIError

from veltri.adapters.llm.base import AbstractLLMClient, ChatMessage

logger = logging.getLogger(__name__)


class OpenAIClient(AbstractLLMClient):
    """Client for any endpoint speaking the OpenAI chat completions protocol.

    Uses the official OpenAI Python SDK with async support.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        """Initialize the async SDK client.

        Args:
            api_key: Provider API key.
            model: Model name (e.g., "meta/llama-3.3-70b-instruct").
            base_url: Optional custom base URL.
            timeout_seconds: Timeout for requests in seconds.
        """
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
        )
        self.model = model

    async def complete(
        self,
        messages: list[ChatMessage],
        *,
        temperature: float = 0.3,
        max_tokens: int = 1200,
    ) -> str | None:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                top_p=1,
                stream=False,
            )
        except OpenAIError as exc:
            logger.warning(
                "llm.request_failed",
                extra={
                    "model": self.model,
                    "error_type": type(exc).__name__,
                    "provider_status": getattr(exc, "status_code", None),
                },
            )
            return None

        if not response.choices:
            logger.warning("llm.empty_response", extra={"model": self.model})
            return None

        content = (response.choices[0].message.content or "").strip()
        return content or None
