"""Mood log and daily focus API router."""

from typing import Annotated

from fastapi import APIRouter, Depends

from quirra.dependencies import get_wellbeing_service, require_role
from quirra.schemas.response_schema import ApiResponse, success_response
from quirra.schemas.wellbeing_schema import (
    DailyFocusResponse,
    LogMoodRequest,
    MoodLogResponse,
    SetFocusRequest,
)
from quirra.services.wellbeing_service import WellbeingService

router = APIRouter(
    prefix="/api",
    tags=["wellbeing"],
    dependencies=[Depends(require_role("authenticated"))],
)

WellbeingServiceDep = Annotated[WellbeingService, Depends(get_wellbeing_service)]


@router.get("/log-mood", response_model=ApiResponse[MoodLogResponse])
async def get_today_mood(service: WellbeingServiceDep) -> dict:
    """Return today's mood, or null."""
    mood = await service.get_today_mood()
    return success_response(MoodLogResponse.model_validate(mood) if mood else None)


@router.post("/log-mood", response_model=ApiResponse[MoodLogResponse])
async def log_mood(body: LogMoodRequest, service: WellbeingServiceDep) -> dict:
    """Record or overwrite today's mood."""
    mood = await service.log_mood(body.mood_label, body.sentiment_score)
    return success_response(MoodLogResponse.model_validate(mood), message="Mood logged")


@router.get("/set-daily-focus", response_model=ApiResponse[DailyFocusResponse])
async def get_today_focus(service: WellbeingServiceDep) -> dict:
    """Return today's focus, or null."""
    focus = await service.get_today_focus()
    return success_response(
        DailyFocusResponse.model_validate(focus) if focus else None
    )


@router.post("/set-daily-focus", response_model=ApiResponse[DailyFocusResponse])
async def set_daily_focus(body: SetFocusRequest, service: WellbeingServiceDep) -> dict:
    """Record or overwrite today's focus."""
    focus = await service.set_focus(body.focus_text)
    return success_response(
        DailyFocusResponse.model_validate(focus), message="Daily focus saved"
    )
