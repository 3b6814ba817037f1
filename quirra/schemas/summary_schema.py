"""Summarization and emotional trend schemas."""

from pydantic import BaseModel, ConfigDict, Field

from quirra.schemas.response_schema import ApiResponse


class ConversationTurn(BaseModel):
    """One message handed in for summarization."""

    role: str = Field(min_length=1)
    content: str


class SummarizeRequest(BaseModel):
    """Batch of recent turns to compress into long-term memory."""

    model_config = ConfigDict(populate_by_name=True)

    chat_session_id: str = Field(
        min_length=1,
        validation_alias="chatSessionId",
        description="Session the summary belongs to",
    )
    messages_to_summarize: list[ConversationTurn] = Field(
        min_length=1,
        validation_alias="messagesToSummarize",
        description="Turns in chronological order",
    )


class SummaryResponse(BaseModel):
    """Generated summary; None when the model returned nothing."""

    model_config = ConfigDict(frozen=True)

    summary: str | None = None


class EmotionalTrendRequest(BaseModel):
    """Optional session to link the trend note to."""

    model_config = ConfigDict(populate_by_name=True)

    chat_session_id: str | None = Field(default=None, validation_alias="chatSessionId")


class SummarizeApiResponse(ApiResponse[SummaryResponse]):
    """Envelope that also exposes ``summary`` at the top level."""

    summary: str | None = None
