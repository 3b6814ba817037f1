"""Access token schemas."""

from pydantic import BaseModel, ConfigDict


class TokenPayload(BaseModel):
    """Decoded Supabase access token claims."""

    model_config = ConfigDict(frozen=True)

    sub: str
    email: str | None = None
    role: str
    exp: int
    iat: int
    session_id: str | None = None
