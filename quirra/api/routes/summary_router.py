"""Summarization and emotional trend API router."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from quirra.core.config import settings
from quirra.core.rate_limit import limiter
from quirra.dependencies import (
    get_emotional_trend_service,
    get_summary_service,
    require_role,
)
from quirra.schemas.response_schema import ApiResponse, success_response
from quirra.schemas.summary_schema import (
    EmotionalTrendRequest,
    SummarizeApiResponse,
    SummarizeRequest,
    SummaryResponse,
)
from quirra.services.emotional_trend_service import EmotionalTrendService
from quirra.services.summary_service import SummaryService

router = APIRouter(
    prefix="/api",
    tags=["memory"],
    dependencies=[Depends(require_role("authenticated"))],
)

SummaryServiceDep = Annotated[SummaryService, Depends(get_summary_service)]
EmotionalTrendServiceDep = Annotated[
    EmotionalTrendService, Depends(get_emotional_trend_service)
]


@router.post("/summarize", response_model=SummarizeApiResponse)
@limiter.limit(settings.auth.summarize_rate_limit)
async def summarize(
    request: Request,
    body: SummarizeRequest,
    service: SummaryServiceDep,
) -> dict:
    """Summarize recent turns and append the summary to memory."""
    summary = await service.summarize(
        chat_session_id=body.chat_session_id,
        turns=body.messages_to_summarize,
    )
    if summary is None:
        return success_response(
            SummaryResponse(summary=None),
            message="No summary generated.",
            summary=None,
        )
    return success_response(
        SummaryResponse(summary=summary),
        message="Conversation summarized and memory updated.",
        summary=summary,
    )


@router.post(
    "/memory/emotional-trends", response_model=ApiResponse[SummaryResponse]
)
async def summarize_emotional_trends(
    body: EmotionalTrendRequest,
    service: EmotionalTrendServiceDep,
) -> dict:
    """Refresh the user's weekly emotional trend note."""
    summary = await service.summarize_trends(chat_session_id=body.chat_session_id)
    message = (
        "Emotional trend summary updated."
        if summary is not None
        else "No emotional trend summary generated."
    )
    return success_response(SummaryResponse(summary=summary), message=message)
