from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

class Settings(BaseSettings):

    api_host: str = Field(default="localhost", description="API host")
    api_port: int = Field(default=3000, description="API port")
    debug: bool = Field(default=False, description="Debug mode")

    database_url: str = Field(
        default="sqlite:///./news_aggregator.db",
        description="Database URL",
        examples=["sqlite:///./news_aggregator.db"]
    )

    allowed_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Allowed CORS origins",
        validation_alias=AliasChoices("CORS_ALLOWED_ORIGINS", "ALLOWED_ORIGINS"),
    )

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format (json or text)")

    # News provider (GNews)
    news_api_key: Optional[str] = Field(
        default=None,
        description="GNews API key; placeholder content is served when unset",
        validation_alias=AliasChoices("NEWS_API_KEY", "GNEWS_API_KEY"),
    )
    news_api_base_url: str = Field(default="https://gnews.io/api/v4", description="News provider base URL")
    news_api_timeout_seconds: float = Field(default=10.0, description="Timeout for a single provider request")
    news_api_max_results: int = Field(default=20, description="Maximum articles requested per query")
    news_api_language: str = Field(default="en", description="Article language requested from the provider")

    # Response cache
    news_cache_ttl_seconds: int = Field(
        default=15 * 60,
        description="Maximum age of a cached article set served to a request"
    )

    # Background refresh
    news_refresh_enabled: bool = Field(default=True, description="Run the background cache refresher")
    news_refresh_interval_seconds: int = Field(
        default=10 * 60,
        description="Interval between refresh cycles; entries younger than this are skipped"
    )
    news_refresh_initial_delay_seconds: float = Field(
        default=5.0,
        description="Delay before the first refresh cycle after startup"
    )
    news_refresh_pacing_seconds: float = Field(
        default=1.0,
        description="Pause between per-user provider calls within a cycle"
    )

    # Authentication
    jwt_secret_key: str = Field(
        default="your-secret-key-change-in-production",
        description="Secret used to sign access tokens",
        validation_alias=AliasChoices("JWT_SECRET", "JWT_SECRET_KEY"),
    )
    jwt_algorithm: str = Field(default="HS256", description="Access token signing algorithm")
    jwt_expires_minutes: int = Field(default=24 * 60, description="Access token lifetime in minutes")
    password_hash_iterations: int = Field(default=200_000, description="PBKDF2 iterations for password hashing")

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_allowed_origins(cls, value):
        if value is None:
            return value
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("news_api_key", mode="before")
    @classmethod
    def blank_key_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    class Config:
        env_file = [".env", ".env.local"]  # .env.local takes precedence over .env
        env_file_encoding = "utf-8"
        extra = "ignore"
        populate_by_name = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()
