from fastapi import APIRouter, Depends

from veltri.adapters.detection.factory import create_detection_client
from veltri.adapters.llm.factory import create_llm_client
from veltri.core.auth import verify_api_key
from veltri.core.rate_limit import rate_limited
from veltri.schemas.ai import (
    ChatRequest,
    ChatResponse,
    DetectionResponse,
    NoteContentRequest,
    ReviewResponse,
    SummaryResponse,
    TagsResponse,
)
from veltri.services.detection_service import DetectionService
from veltri.services.note_ai_service import NoteAIService

router = APIRouter(prefix="/ai", tags=["AI"])

_note_ai_service = NoteAIService(llm=create_llm_client())
_detection_service = DetectionService(client=create_detection_client())


@router.post(
    "/tags",
    response_model=TagsResponse,
    dependencies=[Depends(verify_api_key), Depends(rate_limited("ai-tags"))],
)
async def suggest_tags(body: NoteContentRequest) -> TagsResponse:
    """Suggest 3 to 5 lowercase tags for a note.

    Raises:
        ValidationAppError: 400 if the content is empty.
    """
    return await _note_ai_service.suggest_tags(body.content)


@router.post(
    "/summary",
    response_model=SummaryResponse,
    dependencies=[Depends(verify_api_key), Depends(rate_limited("ai-summary"))],
)
async def summarize_note(body: NoteContentRequest) -> SummaryResponse:
    """Generate a short listing summary for a note."""
    return await _note_ai_service.summarize(body.content)


@router.post(
    "/review",
    response_model=ReviewResponse,
    dependencies=[Depends(verify_api_key), Depends(rate_limited("ai-review"))],
)
async def review_note(body: NoteContentRequest) -> ReviewResponse:
    """Score a note's quality before publishing."""
    return await _note_ai_service.review(body.content)


@router.post(
    "/chat",
    response_model=ChatResponse,
    dependencies=[Depends(verify_api_key), Depends(rate_limited("ai-chat"))],
)
async def chat(body: ChatRequest) -> ChatResponse:
    return await _note_ai_service.chat([m.model_dump() for m in body.messages])


@router.post(
    "/detect",
    response_model=DetectionResponse,
    dependencies=[Depends(verify_api_key), Depends(rate_limited("ai-detect"))],
)
async def detect_ai_text(body: NoteContentRequest) -> DetectionResponse:
    """Estimate whether a note was written by an AI model.

    Raises:
        ValidationAppError: 400 if the content is shorter than 40 characters.
        DetectionAppError: 500 if detection is not configured, 502 if the
            provider fails.
    """
    return await _detection_service.detect(body.content)
