# ==============================================================================
# Application Configuration
# ==============================================================================
"""
Configuration management using pydantic-settings.

All configuration is loaded from environment variables, with support for
.env files via python-dotenv.
"""

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file before any settings are instantiated
load_dotenv()


class PostgresSettings(BaseSettings):
    """PostgreSQL connection settings for the event and transaction stores."""

    model_config = SettingsConfigDict(env_prefix="PG_")

    host: str = Field(default="localhost", description="PostgreSQL host")
    port: int = Field(default=5432, description="PostgreSQL port")
    user: str = Field(default="postgres", description="PostgreSQL username")
    password: str = Field(default="", description="PostgreSQL password")
    database: str = Field(default="storefront", description="Database name")
    schema_name: str = Field(default="funnel", description="Schema name")
    sslmode: str = Field(default="prefer", description="SSL mode")
    connect_timeout: int = Field(default=10, description="Connect timeout in seconds")

    @property
    def connection_string(self) -> str:
        """Build PostgreSQL connection string."""
        return (
            f"postgresql://{self.user}:{self.password}@"
            f"{self.host}:{self.port}/{self.database}?sslmode={self.sslmode}"
            f"&connect_timeout={self.connect_timeout}"
        )


class ValkeySettings(BaseSettings):
    """Valkey (Redis-compatible) connection settings for the report cache."""

    model_config = SettingsConfigDict(env_prefix="VALKEY_")

    host: str = Field(default="localhost", description="Valkey host")
    port: int = Field(default=6379, description="Valkey port")
    password: Optional[str] = Field(default=None, description="Valkey password")
    db: int = Field(default=0, description="Valkey database number")
    ssl: bool = Field(default=False, description="Use SSL/TLS connection")

    @property
    def url(self) -> str:
        """Build Valkey connection URL."""
        scheme = "rediss" if self.ssl else "redis"
        if self.password:
            return f"{scheme}://:{self.password}@{self.host}:{self.port}/{self.db}"
        return f"{scheme}://{self.host}:{self.port}/{self.db}"


class ReportSettings(BaseSettings):
    """Funnel report defaults."""

    model_config = SettingsConfigDict(env_prefix="REPORT_")

    default_limit: int = Field(default=10, description="Entries per ranked list")
    opportunity_min_views: int = Field(
        default=10, description="Minimum views for an entity to count as an opportunity"
    )
    opportunity_max_conversion_rate: float = Field(
        default=5.0, description="Conversion rate (percent) below which an entity is an opportunity"
    )
    fetch_workers: int = Field(
        default=2, description="Threads used to read events and transactions in parallel"
    )
    cache_enabled: bool = Field(default=False, description="Cache computed reports in Valkey")
    cache_ttl_seconds: int = Field(default=300, description="TTL of cached reports in seconds")


class RateLimitSettings(BaseSettings):
    """Fixed-window rate limit for the storefront assistant endpoint."""

    model_config = SettingsConfigDict(env_prefix="RATE_LIMIT_")

    max_requests: int = Field(default=20, description="Requests allowed per window per key")
    window_seconds: float = Field(default=60.0, description="Window length in seconds")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    # Nested settings
    postgres: PostgresSettings = Field(default_factory=PostgresSettings)
    valkey: ValkeySettings = Field(default_factory=ValkeySettings)
    report: ReportSettings = Field(default_factory=ReportSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)

    # General settings
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    default_currency: str = Field(default="USD", description="Currency assumed for tenants without one")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once and cached for subsequent calls.
    """
    return Settings()
