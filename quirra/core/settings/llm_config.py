"""LLM call-site configuration."""

from pydantic import BaseModel, SecretStr


class LLMConfig(BaseModel, frozen=True):
    """Settings for one chat-completion call site.

    Each feature that talks to a hosted model (analysis, summaries, trend
    notes, chat replies) gets its own instance so temperature, token ceiling
    and timeout stay independent.
    """

    api_key: SecretStr
    model: str
    base_url: str | None = None
    temperature: float
    max_tokens: int
    timeout_seconds: float
    app_title: str | None = None
    referer: str | None = None

    @property
    def is_configured(self) -> bool:
        """Check if an API key is present."""
        return bool(self.api_key.get_secret_value())

    @property
    def default_headers(self) -> dict[str, str]:
        """Attribution headers sent to OpenRouter-style gateways."""
        headers: dict[str, str] = {}
        if self.referer:
            headers["HTTP-Referer"] = self.referer
        if self.app_title:
            headers["X-Title"] = self.app_title
        return headers
