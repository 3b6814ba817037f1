"""Domain-specific configuration models."""

from quirra.core.settings.app_config import AppConfig
from quirra.core.settings.auth_config import AuthConfig
from quirra.core.settings.database_config import DatabaseConfig
from quirra.core.settings.llm_config import LLMConfig
from quirra.core.settings.redis_config import RedisConfig
from quirra.core.settings.server_config import ServerConfig
from quirra.core.settings.supabase_config import SupabaseConfig

__all__ = [
    "AppConfig",
    "AuthConfig",
    "DatabaseConfig",
    "LLMConfig",
    "RedisConfig",
    "ServerConfig",
    "SupabaseConfig",
]
