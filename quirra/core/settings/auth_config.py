"""Access token verification configuration."""

from pydantic import BaseModel, SecretStr


class AuthConfig(BaseModel, frozen=True):
    """Supabase access token settings."""

    jwt_secret: SecretStr
    algorithm: str
    audience: str
    max_token_lifetime_seconds: int
    summarize_rate_limit: str
    ask_rate_limit: str
