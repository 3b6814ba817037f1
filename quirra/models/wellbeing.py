"""Mood log and daily focus database models."""

import datetime as dt

from sqlalchemy import Date, DateTime, Float, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from quirra.core.database import Base


class MoodLog(Base):
    """Self-reported mood, one per user per day."""

    __tablename__ = "mood_logs"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_mood_logs_user_id_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    mood_label: Mapped[str] = mapped_column(String(50), nullable=False)
    sentiment_score: Mapped[float] = mapped_column(Float, nullable=False)
    timestamp: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class DailyFocus(Base):
    """The user's stated focus for the day."""

    __tablename__ = "daily_focus"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_daily_focus_user_id_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    focus_text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
