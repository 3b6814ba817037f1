"""Mood log and daily focus schemas."""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field


class LogMoodRequest(BaseModel):
    """Today's self-reported mood."""

    model_config = ConfigDict(populate_by_name=True)

    mood_label: str = Field(min_length=1, max_length=50, validation_alias="moodLabel")
    sentiment_score: float = Field(ge=-1.0, le=1.0, validation_alias="sentimentScore")


class MoodLogResponse(BaseModel):
    """Stored mood for a day."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    date: dt.date
    mood_label: str
    sentiment_score: float
    timestamp: dt.datetime


class SetFocusRequest(BaseModel):
    """Today's focus."""

    model_config = ConfigDict(populate_by_name=True)

    focus_text: str = Field(min_length=1, max_length=500, validation_alias="focusText")


class DailyFocusResponse(BaseModel):
    """Stored focus for a day."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    date: dt.date
    focus_text: str
