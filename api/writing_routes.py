"""
Writing API Routes
Vibe Writer - streamed pipeline stages

Each endpoint validates its body, opens the provider stream and returns
the framed fragments as an event stream. Anything refused before the
stream opens comes back as a JSON error instead (see api.main handlers).
"""

from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from config.logging_config import get_logger
from core.models import ErrorResponse, GenerateRequest, ReviewRequest, ReviseRequest
from core.streaming import encode_stream
from core.writing_service import WritingService

logger = get_logger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # nginx must not buffer the stream
}

_service: Optional[WritingService] = None


def get_writing_service() -> WritingService:
    """Get or create the process-wide writing service"""
    global _service
    if _service is None:
        _service = WritingService()
    return _service


def event_stream(fragments: AsyncIterator[str]) -> StreamingResponse:
    return StreamingResponse(
        encode_stream(fragments),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


# Refusals before the stream opens
STAGE_ERRORS = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    502: {"model": ErrorResponse, "description": "Provider refused the stream"},
}

router = APIRouter(prefix="/api", tags=["Writing"])


@router.post("/generate", responses=STAGE_ERRORS)
async def generate(
    payload: GenerateRequest,
    service: WritingService = Depends(get_writing_service),
):
    """Stream a first draft written from the source material."""
    fragments = await service.open_generate(payload)
    return event_stream(fragments)


@router.post("/review", responses=STAGE_ERRORS)
async def review(
    payload: ReviewRequest,
    service: WritingService = Depends(get_writing_service),
):
    """
    Stream one review pass over an article.

    ``reviewStep`` picks the pass: content, style or detail. The stream
    carries the complete rewritten article.
    """
    fragments = await service.open_review(payload)
    return event_stream(fragments)


@router.post("/revise", responses=STAGE_ERRORS)
async def revise(
    payload: ReviseRequest,
    service: WritingService = Depends(get_writing_service),
):
    """Stream the article rewritten according to one instruction."""
    fragments = await service.open_revise(payload)
    return event_stream(fragments)
