"""Pydantic schemas for the AI note endpoints."""

from typing import Literal

from pydantic import BaseModel, Field


class NoteContentRequest(BaseModel):
    """Body shared by every endpoint that works on a single note."""

    content: str = Field(
        ...,
        description="Note text (plain text or markdown).",
    )


class TagsResponse(BaseModel):
    tags: list[str] = Field(
        ...,
        max_length=5,
        description="Up to 5 lowercase tags describing the note.",
    )
    fallback: bool = Field(
        default=False,
        description="True if the provider was unavailable and local defaults were returned.",
    )


class SummaryResponse(BaseModel):
    summary: str = Field(..., description="Short summary of the note.")
    fallback: bool = False


class ReviewResponse(BaseModel):
    """Quality review used before a note is published."""

    is_valid: bool = Field(..., description="Whether the note is fit for publishing.")
    feedback: str = Field(..., description="Short actionable feedback for the author.")
    grammar_score: int = Field(..., ge=0, le=10)
    accuracy_score: int = Field(..., ge=0, le=10)
    learning_value_score: int = Field(..., ge=0, le=10)
    fallback: bool = False


class ChatMessageIn(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str = Field(..., max_length=20000)


class ChatRequest(BaseModel):
    messages: list[ChatMessageIn] = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Conversation so far, oldest first.",
    )


class ChatResponse(BaseModel):
    reply: str
    fallback: bool = False


class DetectionResponse(BaseModel):
    """Outcome of AI-generated text detection."""

    model: str = Field(..., description="Classifier model id.")
    label: str = Field(..., description="'AI-generated', 'Human-written', or the raw provider label.")
    score: float = Field(..., description="Classifier confidence for the label.")
    is_likely_ai: bool
    summary: str = Field(..., description="Human-readable verdict, e.g. 'AI-generated (93% confidence)'.")
