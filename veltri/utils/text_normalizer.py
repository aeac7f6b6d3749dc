import json
import re
from typing import Any

_CODE_FENCE_RE = re.compile(r"```.*?```", re.DOTALL)
_MARKDOWN_PUNCT_RE = re.compile(r"[#*_`>\[\]!()\-]")
_SENTENCE_END_RE = re.compile(r"(?<=[.!?])\s+")
_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


def normalize_text(text: str) -> str:
    """Normalize text by standardizing line breaks and whitespace.

    Converts different line break formats to standard newlines,
    collapses runs of spaces/tabs and reduces excessive blank lines.

    Args:
        text: Raw text to normalize.

    Returns:
        str: Normalized and trimmed text.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def strip_markdown(text: str) -> str:
    """Drop code blocks and markdown punctuation, collapsing all whitespace."""
    text = _CODE_FENCE_RE.sub(" ", text)
    text = _MARKDOWN_PUNCT_RE.sub(" ", text)
    return re.sub(r"\s+", " ", text).strip()


def first_sentence(text: str) -> str:
    """Return the first sentence of ``text``, or all of it if none ends."""
    head = _SENTENCE_END_RE.split(text, maxsplit=1)[0].strip()
    return head or text


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Parse the outermost ``{...}`` span of a model reply.

    Models often wrap JSON in prose or code fences; anything that does not
    decode to a JSON object yields None.
    """
    match = _JSON_OBJECT_RE.search(text)
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None
