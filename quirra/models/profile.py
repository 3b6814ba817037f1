"""User profile database model."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from quirra.core.database import Base


class Profile(Base):
    """Account details and personality preferences; ``id`` is the auth user id."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    region: Mapped[str | None] = mapped_column(String(100), nullable=True)
    newsletter: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    preferred_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    learning_style: Mapped[str | None] = mapped_column(String(30), nullable=True)
    communication_preference: Mapped[str | None] = mapped_column(
        String(30), nullable=True
    )
    feedback_preference: Mapped[str | None] = mapped_column(String(30), nullable=True)
    is_pending_deletion: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    deletion_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
