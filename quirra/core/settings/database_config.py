"""Database connection configuration."""

from pydantic import BaseModel, SecretStr

ASYNC_DRIVER_PREFIX = "postgresql+asyncpg://"


class DatabaseConfig(BaseModel, frozen=True):
    """Database connection settings."""

    url: SecretStr

    @property
    def async_url(self) -> str:
        """DB URL rewritten for the asyncpg driver."""
        base = self.url.get_secret_value()
        for prefix in ("postgres://", "postgresql://"):
            if base.startswith(prefix):
                return ASYNC_DRIVER_PREFIX + base[len(prefix) :]
        return base
