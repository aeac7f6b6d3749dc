from abc import ABC, abstractmethod
from typing import Literal, TypedDict


class ChatMessage(TypedDict):
	role: Literal["system", "user", "assistant"]
	content: str


class AbstractLLMClient(ABC):
	"""Interface for chat-completion text generators.

	Implementations never raise for provider trouble: they log it and return
	None so callers can substitute local fallback text.
	"""

	@abstractmethod
	async def complete(
		self,
		messages: list[ChatMessage],
		*,
		temperature: float = 0.3,
		max_tokens: int = 1200,
	) -> str | None:
		"""Generate the assistant reply for a conversation.

		Args:
			messages: Conversation so far, oldest first.
			temperature: Sampling temperature.
			max_tokens: Upper bound on generated tokens.

		Returns:
			str | None: Trimmed reply text, or None when the provider failed or
			returned nothing.
		"""
		...
