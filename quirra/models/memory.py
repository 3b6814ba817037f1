"""Long-term memory database model."""

from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from quirra.core.database import Base


class MemorySnapshot(Base):
    """Memory entry recalled into future prompts.

    Summaries are appended (``key`` is null). Keyed entries such as the
    emotional trend note are unique per user and overwritten in place.
    """

    __tablename__ = "memory"
    __table_args__ = (
        UniqueConstraint("user_id", "key", name="uq_memory_user_id_key"),
        Index("ix_memory_user_id_timestamp", "user_id", "timestamp"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    chat_session_id: Mapped[str | None] = mapped_column(
        String(36), nullable=True, index=True
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    key: Mapped[str | None] = mapped_column(String(100), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
