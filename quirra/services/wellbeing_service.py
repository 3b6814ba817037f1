"""Daily mood and focus."""

import datetime as dt

import structlog

from quirra.models.wellbeing import DailyFocus, MoodLog
from quirra.repositories.wellbeing_repo import WellbeingRepository

logger = structlog.get_logger()


def today() -> dt.date:
    """Calendar day in UTC; mood and focus rows are keyed by it."""
    return dt.datetime.now(dt.UTC).date()


class WellbeingService:
    """Stores one mood and one focus per user per day."""

    def __init__(self, wellbeing_repo: WellbeingRepository, user_id: str) -> None:
        self._wellbeing_repo = wellbeing_repo
        self._user_id = user_id

    async def log_mood(self, mood_label: str, sentiment_score: float) -> MoodLog:
        mood = await self._wellbeing_repo.upsert_mood(
            self._user_id, today(), mood_label, sentiment_score
        )
        logger.info("Mood logged", user_id=self._user_id, mood=mood_label)
        return mood

    async def get_today_mood(self) -> MoodLog | None:
        return await self._wellbeing_repo.find_mood(self._user_id, today())

    async def set_focus(self, focus_text: str) -> DailyFocus:
        focus = await self._wellbeing_repo.upsert_focus(
            self._user_id, today(), focus_text.strip()
        )
        logger.info("Daily focus set", user_id=self._user_id)
        return focus

    async def get_today_focus(self) -> DailyFocus | None:
        return await self._wellbeing_repo.find_focus(self._user_id, today())
