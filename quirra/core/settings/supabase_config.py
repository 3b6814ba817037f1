"""Supabase project configuration."""

from pydantic import BaseModel, SecretStr


class SupabaseConfig(BaseModel, frozen=True):
    """Supabase project endpoints and keys."""

    url: str
    anon_key: SecretStr
    service_role_key: SecretStr
    timeout_seconds: float

    @property
    def auth_url(self) -> str:
        """Base URL of the GoTrue auth API."""
        return f"{self.url.rstrip('/')}/auth/v1"

    @property
    def is_configured(self) -> bool:
        """Check if the project URL and service key are present."""
        return bool(self.url) and bool(self.service_role_key.get_secret_value())
