"""Mood log and daily focus repository."""

import datetime as dt

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from quirra.models.wellbeing import DailyFocus, MoodLog


class WellbeingRepository:
    """Encapsulates per-day mood and focus queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_mood(self, user_id: str, day: dt.date) -> MoodLog | None:
        result = await self._session.execute(
            select(MoodLog).where(and_(MoodLog.user_id == user_id, MoodLog.date == day))
        )
        return result.scalar_one_or_none()

    async def upsert_mood(
        self,
        user_id: str,
        day: dt.date,
        mood_label: str,
        sentiment_score: float,
    ) -> MoodLog:
        """Insert or overwrite the mood for (user_id, day)."""
        mood = await self.find_mood(user_id, day)
        if mood is None:
            mood = MoodLog(user_id=user_id, date=day)
            self._session.add(mood)
        mood.mood_label = mood_label
        mood.sentiment_score = sentiment_score
        mood.timestamp = dt.datetime.now(dt.UTC)
        await self._session.flush()
        await self._session.refresh(mood)
        return mood

    async def find_moods_since(self, user_id: str, since: dt.date) -> list[MoodLog]:
        """Mood logs dated on or after ``since``, oldest first."""
        result = await self._session.execute(
            select(MoodLog)
            .where(and_(MoodLog.user_id == user_id, MoodLog.date >= since))
            .order_by(MoodLog.date.asc())
        )
        return list(result.scalars().all())

    async def find_focus(self, user_id: str, day: dt.date) -> DailyFocus | None:
        result = await self._session.execute(
            select(DailyFocus).where(
                and_(DailyFocus.user_id == user_id, DailyFocus.date == day)
            )
        )
        return result.scalar_one_or_none()

    async def upsert_focus(
        self, user_id: str, day: dt.date, focus_text: str
    ) -> DailyFocus:
        """Insert or overwrite the focus for (user_id, day)."""
        focus = await self.find_focus(user_id, day)
        if focus is None:
            focus = DailyFocus(user_id=user_id, date=day)
            self._session.add(focus)
        focus.focus_text = focus_text
        await self._session.flush()
        await self._session.refresh(focus)
        return focus

    async def delete_by_user(self, user_id: str) -> None:
        await self._session.execute(delete(MoodLog).where(MoodLog.user_id == user_id))
        await self._session.execute(
            delete(DailyFocus).where(DailyFocus.user_id == user_id)
        )
