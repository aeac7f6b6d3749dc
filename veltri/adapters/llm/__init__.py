"""LLM adapter layer - abstracts over OpenAI-compatible providers."""

from veltri.adapters.llm.base import AbstractLLMClient, ChatMessage
from veltri.adapters.llm.factory import create_llm_client
from veltri.adapters.llm.offline import OfflineLLMClient
from veltri.adapters.llm.openai_client import OpenAIClient

__all__ = [
    "AbstractLLMClient",
    "ChatMessage",
    "OfflineLLMClient",
    "OpenAIClient",
    "create_llm_client",
]
