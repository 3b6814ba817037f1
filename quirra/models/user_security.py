"""Two-factor and recovery settings database model."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from quirra.core.database import Base


class UserSecurity(Base):
    """Per-user two-factor method, backup codes and recovery email."""

    __tablename__ = "user_security"

    user_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    two_factor_method: Mapped[str | None] = mapped_column(String(30), nullable=True)
    backup_codes: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    backup_codes_generated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recovery_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pending_recovery_email: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    recovery_email_verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
