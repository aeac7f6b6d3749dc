"""AI writing helpers for notes: tags, summaries, quality review and chat.

Each operation sends one prompt to the text-generation provider and parses
the reply. When the provider is unavailable the operation still answers,
using the local fallbacks in ``veltri.services.fallbacks``, and marks the
response with ``fallback=True``.
"""

from __future__ import annotations

import logging
from typing import Any

from veltri.adapters.llm.base import AbstractLLMClient, ChatMessage
from veltri.core.config import settings
from veltri.core.errors import ValidationAppError
from veltri.schemas.ai import ChatResponse, ReviewResponse, SummaryResponse, TagsResponse
from veltri.services import fallbacks
from veltri.utils.text_normalizer import extract_json_object, normalize_text

logger = logging.getLogger(__name__)

MAX_TAGS = 5

CHAT_SYSTEM_PROMPT = (
    "You are a writing assistant inside a note editor. Help the author improve "
    "structure, clarity and wording of their study notes. Be concise."
)


def build_tags_prompt(content: str) -> str:
    return f"""You are a content tagger. Read the following text and suggest 3 to 5 highly relevant tags/keywords that categorize this content.

You MUST respond with ONLY a valid JSON object (no markdown, no code fences, no extra text) with this format:
{{"tags": ["tag1", "tag2", "tag3", "tag4", "tag5"]}}

Each tag should be a single word or short phrase (max 2-3 words), lowercase, relevant to the content topic.

Text to tag:
{content}"""


def build_summary_prompt(content: str) -> str:
    return f"""Generate a concise 2-sentence summary of the following note for a marketplace listing. Respond with the summary text only.

Note content:
{content}"""


def build_review_prompt(content: str) -> str:
    return f"""You review study notes before they are published on a marketplace. Judge grammar, factual accuracy and learning value.

You MUST respond with ONLY a valid JSON object with this format:
{{"isValid": true, "feedback": "one or two sentences", "grammar_score": 0-10, "accuracy_score": 0-10, "learning_value_score": 0-10}}

Set isValid to false for spam, gibberish or content with no learning value.

Text to review:
{content}"""


def parse_tags(reply: str) -> list[str]:
    """Extract up to five normalized tags from a model reply.

    Returns ``["general"]`` when the reply holds no usable tag list.
    """
    parsed = extract_json_object(reply)
    raw_tags = parsed.get("tags") if parsed else None
    if not isinstance(raw_tags, list):
        return list(fallbacks.UNPARSEABLE_TAGS)

    tags = [str(tag).strip().lower() for tag in raw_tags]
    tags = [tag for tag in tags if tag][:MAX_TAGS]
    return tags or list(fallbacks.UNPARSEABLE_TAGS)


def _score(value: Any) -> int:
    try:
        return min(10, max(0, round(float(value))))
    except (TypeError, ValueError, OverflowError):
        return 0


def parse_review(reply: str) -> dict[str, Any] | None:
    """Map the reviewer's JSON onto ReviewResponse fields, or None if unusable."""
    parsed = extract_json_object(reply)
    if not parsed or "isValid" not in parsed:
        return None
    return {
        "is_valid": bool(parsed.get("isValid")),
        "feedback": str(parsed.get("feedback") or "").strip(),
        "grammar_score": _score(parsed.get("grammar_score")),
        "accuracy_score": _score(parsed.get("accuracy_score")),
        "learning_value_score": _score(parsed.get("learning_value_score")),
    }


class NoteAIService:
    """Prompt construction and reply parsing for the AI note operations.

    Attributes:
        llm: Text-generation client; returns None when the provider fails.
    """

    def __init__(self, llm: AbstractLLMClient) -> None:
        self.llm = llm

    def _prepare(self, content: str) -> str:
        text = normalize_text(content or "")
        if not text:
            raise ValidationAppError(
                code="content_required",
                message="Content is required",
            )
        return text[: settings.app.max_prompt_chars]

    async def _prompt(self, operation: str, prompt: str, **options: Any) -> str | None:
        reply = await self.llm.complete([{"role": "user", "content": prompt}], **options)
        if reply is None:
            logger.warning("llm.fallback", extra={"operation": operation})
        return reply

    async def suggest_tags(self, content: str) -> TagsResponse:
        """Suggest 3-5 tags for a note.

        Raises:
            ValidationAppError: If the content is empty.
        """
        text = self._prepare(content)
        reply = await self._prompt("tags", build_tags_prompt(text), temperature=0.3, max_tokens=260)
        if reply is None:
            return TagsResponse(tags=list(fallbacks.FALLBACK_TAGS), fallback=True)
        return TagsResponse(tags=parse_tags(reply))

    async def summarize(self, content: str) -> SummaryResponse:
        text = self._prepare(content)
        reply = await self._prompt("summary", build_summary_prompt(text), temperature=0.3, max_tokens=300)
        if reply is None:
            return SummaryResponse(summary=fallbacks.fallback_summary(text), fallback=True)
        return SummaryResponse(summary=reply)

    async def review(self, content: str) -> ReviewResponse:
        """Score a note's grammar, accuracy and learning value (0-10 each)."""
        text = self._prepare(content)
        reply = await self._prompt("review", build_review_prompt(text), temperature=0.2, max_tokens=400)
        review = parse_review(reply) if reply is not None else None
        if review is None:
            if reply is not None:
                logger.warning("llm.unparseable_reply", extra={"operation": "review"})
            return ReviewResponse(**fallbacks.FALLBACK_REVIEW, fallback=True)
        return ReviewResponse(**review)

    async def chat(self, messages: list[ChatMessage]) -> ChatResponse:
        """Answer the latest message of an editor conversation."""
        conversation = list(messages)
        if not any(m["role"] == "system" for m in conversation):
            conversation.insert(0, {"role": "system", "content": CHAT_SYSTEM_PROMPT})

        reply = await self.llm.complete(conversation, temperature=0.5, max_tokens=800)
        if reply is None:
            logger.warning("llm.fallback", extra={"operation": "chat"})
            return ChatResponse(reply=fallbacks.fallback_chat_reply(messages), fallback=True)
        return ChatResponse(reply=reply)
