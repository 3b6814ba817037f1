"""Application configuration using Pydantic Settings V2."""

from functools import cached_property
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from quirra.core.settings import (
    AppConfig,
    AuthConfig,
    DatabaseConfig,
    LLMConfig,
    RedisConfig,
    ServerConfig,
    SupabaseConfig,
)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Flat fields are loaded directly from environment variables. Variable
    names used by the web front end (``NEXT_PUBLIC_*``) are accepted as
    aliases so both deployments can share one ``.env``.
    Domain properties provide grouped access (e.g. settings.summary_llm.model).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # OpenAI (message analysis)
    openai_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="OpenAI API key used for message analysis",
    )
    analysis_model: str = Field(
        default="gpt-4o-mini",
        description="Model used to classify user messages",
    )
    analysis_timeout_seconds: float = Field(
        default=7.0,
        gt=0,
        le=60,
        description="Timeout for the analysis call",
    )
    analysis_max_tokens: int = Field(
        default=600,
        ge=50,
        le=4000,
        description="Token ceiling for the analysis call",
    )

    # OpenRouter (summaries, trend notes, chat replies)
    openrouter_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="OpenRouter API key",
    )
    openrouter_base_url: str = Field(
        default=OPENROUTER_BASE_URL,
        description="OpenRouter-compatible chat completions base URL",
    )
    summary_model: str = Field(
        default="meta-llama/llama-4-maverick:free",
        description="Model used for conversation summaries",
    )
    summary_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=60,
        description="Timeout for the summarization call",
    )
    trend_model: str = Field(
        default="deepseek/deepseek-chat-v3-0324:free",
        description="Model used for emotional trend notes",
    )
    chat_model: str = Field(
        default="mistralai/mistral-7b-instruct:free",
        description="Model used for assistant replies",
    )
    chat_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=120,
        description="Timeout for the reply call",
    )

    # App
    app_name: str = Field(
        default="quirra",
        description="Application name",
    )
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(
        default=True,
        description="Debug mode",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level",
    )
    public_app_url: str = Field(
        default="http://localhost:3000",
        validation_alias=AliasChoices("public_app_url", "next_public_app_url"),
        description="Public URL of the web front end (used in share links)",
    )
    deletion_grace_days: int = Field(
        default=7,
        ge=1,
        le=90,
        description="Days between deactivation and account deletion",
    )
    backup_code_count: int = Field(
        default=8,
        ge=1,
        le=20,
        description="Number of two-factor backup codes issued at once",
    )

    # Server
    host: str = Field(
        default="0.0.0.0",
        description="Server host",
    )
    port: int = Field(
        default=8004,
        ge=1,
        le=65535,
        description="Server port",
    )

    # Supabase
    supabase_url: str = Field(
        default="",
        validation_alias=AliasChoices("supabase_url", "next_public_supabase_url"),
        description="Supabase project URL",
    )
    supabase_anon_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices(
            "supabase_anon_key", "next_public_supabase_anon_key"
        ),
        description="Supabase anon (public) key",
    )
    supabase_service_role_key: SecretStr = Field(
        default=SecretStr(""),
        description="Supabase service role key for admin auth calls",
    )
    supabase_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=60,
        description="Timeout for auth provider calls",
    )

    # Access tokens
    supabase_jwt_secret: SecretStr = Field(
        description="Supabase project JWT secret used to verify access tokens",
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm",
    )
    jwt_audience: str = Field(
        default="authenticated",
        description="Expected JWT audience",
    )
    jwt_max_token_lifetime_seconds: int = Field(
        default=3600,
        ge=60,
        le=604800,
        description="Longest access token lifetime issued by the auth provider",
    )
    summarize_rate_limit: str = Field(
        default="10/minute",
        description="Summarize endpoint rate limit",
    )
    ask_rate_limit: str = Field(
        default="20/minute",
        description="Ask endpoint rate limit",
    )

    # Database
    database_url: SecretStr = Field(
        description="Postgres URL (postgresql://... or postgresql+asyncpg://...)",
    )

    # Redis
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )

    # --- Domain properties ---

    @cached_property
    def analysis_llm(self) -> LLMConfig:
        """Message analysis call settings."""
        return LLMConfig(
            api_key=self.openai_api_key,
            model=self.analysis_model,
            temperature=0.1,
            max_tokens=self.analysis_max_tokens,
            timeout_seconds=self.analysis_timeout_seconds,
        )

    @cached_property
    def summary_llm(self) -> LLMConfig:
        """Conversation summary call settings."""
        return self._openrouter_config(
            model=self.summary_model,
            temperature=0.2,
            max_tokens=150,
            timeout_seconds=self.summary_timeout_seconds,
            title="Quirra - Summarization",
        )

    @cached_property
    def trend_llm(self) -> LLMConfig:
        """Emotional trend note call settings."""
        return self._openrouter_config(
            model=self.trend_model,
            temperature=0.5,
            max_tokens=150,
            timeout_seconds=self.summary_timeout_seconds,
            title="Quirra - Emotional Trends",
        )

    @cached_property
    def chat_llm(self) -> LLMConfig:
        """Assistant reply call settings."""
        return self._openrouter_config(
            model=self.chat_model,
            temperature=0.7,
            max_tokens=1024,
            timeout_seconds=self.chat_timeout_seconds,
            title="Quirra",
        )

    @cached_property
    def app(self) -> AppConfig:
        """Application environment configuration."""
        return AppConfig(
            name=self.app_name,
            env=self.app_env,
            debug=self.debug,
            public_url=self.public_app_url,
            log_level=self.log_level,
            deletion_grace_days=self.deletion_grace_days,
            backup_code_count=self.backup_code_count,
        )

    @cached_property
    def server(self) -> ServerConfig:
        """Server configuration."""
        return ServerConfig(
            host=self.host,
            port=self.port,
        )

    @cached_property
    def supabase(self) -> SupabaseConfig:
        """Supabase project configuration."""
        return SupabaseConfig(
            url=self.supabase_url,
            anon_key=self.supabase_anon_key,
            service_role_key=self.supabase_service_role_key,
            timeout_seconds=self.supabase_timeout_seconds,
        )

    @cached_property
    def auth(self) -> AuthConfig:
        """Access token verification configuration."""
        return AuthConfig(
            jwt_secret=self.supabase_jwt_secret,
            algorithm=self.jwt_algorithm,
            audience=self.jwt_audience,
            max_token_lifetime_seconds=self.jwt_max_token_lifetime_seconds,
            summarize_rate_limit=self.summarize_rate_limit,
            ask_rate_limit=self.ask_rate_limit,
        )

    @cached_property
    def database(self) -> DatabaseConfig:
        """Database connection configuration."""
        return DatabaseConfig(url=self.database_url)

    @cached_property
    def redis(self) -> RedisConfig:
        """Redis connection configuration."""
        return RedisConfig(url=self.redis_url)

    # --- Convenience properties (delegate to domain configs) ---

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app.is_development

    def _openrouter_config(
        self,
        model: str,
        temperature: float,
        max_tokens: int,
        timeout_seconds: float,
        title: str,
    ) -> LLMConfig:
        return LLMConfig(
            api_key=self.openrouter_api_key,
            model=model,
            base_url=self.openrouter_base_url,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout_seconds=timeout_seconds,
            app_title=title,
            referer=self.public_app_url,
        )


# Global settings instance
settings = Settings()
