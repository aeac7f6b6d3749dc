"""Local answers used when the text-generation provider is unavailable."""

from __future__ import annotations

from veltri.adapters.llm.base import ChatMessage
from veltri.utils.text_normalizer import first_sentence, strip_markdown

FALLBACK_TAGS = ["general", "notes", "study"]
UNPARSEABLE_TAGS = ["general"]

EMPTY_SUMMARY = "This note contains useful material for study and revision."
SUMMARY_SUFFIX = "This summary was auto-generated from the note content."
SUMMARY_SOURCE_CHARS = 260

FALLBACK_REVIEW = {
    "is_valid": True,
    "feedback": (
        "The content is useful and reasonably structured, but could be improved "
        "with more concrete examples."
    ),
    "grammar_score": 7,
    "accuracy_score": 7,
    "learning_value_score": 7,
}

EMPTY_CHAT_REPLY = (
    "Share what you want to improve in your note, and I can suggest structure, "
    "clarity, and wording changes."
)
CHAT_QUOTE_CHARS = 180


def fallback_summary(content: str) -> str:
    """First sentence of the note's opening, tagged as auto-generated."""
    source = strip_markdown(content)
    if not source:
        return EMPTY_SUMMARY
    return f"{first_sentence(source[:SUMMARY_SOURCE_CHARS])} {SUMMARY_SUFFIX}".strip()


def fallback_chat_reply(messages: list[ChatMessage]) -> str:
    last_user = next(
        (m["content"] for m in reversed(messages) if m["role"] == "user"),
        "",
    ).strip()
    if not last_user:
        return EMPTY_CHAT_REPLY
    return (
        "I can help refine this. Start by clarifying your key point, then add one "
        f'concrete example. Draft to improve: "{last_user[:CHAT_QUOTE_CHARS]}"'
    )
