"""Stand-in client used when no provider key is configured."""

import logging

from veltri.adapters.llm.base import AbstractLLMClient, ChatMessage

logger = logging.getLogger(__name__)


class OfflineLLMClient(AbstractLLMClient):
    """Always reports "no answer" so services use their local fallback text."""

    async def complete(
        self,
        messages: list[ChatMessage],
        *,
        temperature: float = 0.3,
        max_tokens: int = 1200,
    ) -> str | None:
        logger.debug("llm.not_configured", extra={"message_count": len(messages)})
        return None
