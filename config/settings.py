"""
Configuration for the logbook-line service.

Centralizes the environment variables of the LINE webhook service using
pydantic-settings, with .env file support.

Supported environment variables:
- LOG_LEVEL / LOG_FORMAT: Logging level and format (json | text)
- LINE_CHANNEL_SECRET: Secret used to verify X-Line-Signature
- LINE_CHANNEL_ACCESS_TOKEN: Bearer token for the Messaging API
- REDIS_URL: Connection for the conversation state store
- STATE_BACKEND: redis | memory
- CONVERSATION_TTL_SECONDS: Wizard state TTL. Default: 2700 (45 min)
- ACTIVE_WORKOUT_TTL_SECONDS: Active workout marker TTL. Default: 7200
- SUPABASE_URL / SUPABASE_SERVICE_KEY: Domain tables (users, workouts, ...)
"""

from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceSettings(BaseSettings):
    """Centralized service configuration."""

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    # LINE Messaging API
    line_channel_secret: str = ""
    line_channel_access_token: str = ""
    line_api_base_url: str = "https://api.line.me"
    line_http_timeout_seconds: float = 10.0

    # Conversation state store
    redis_url: str = "redis://localhost:6379/0"
    state_backend: Literal["redis", "memory"] = "redis"
    conversation_ttl_seconds: int = 2700  # 45 minutes
    active_workout_ttl_seconds: int = 7200  # 2 hours
    conversation_key_prefix: str = "conv"
    serialize_per_user: bool = True

    # Wizard rules
    min_exercise_id_length: int = 4
    verify_exercise_exists: bool = True

    # Supabase (domain tables)
    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None
    supabase_timeout_seconds: float = 5.0
    supabase_slow_query_ms: int = 2000
    workout_source: str = "line"

    # HTTP server
    server_host: str = "0.0.0.0"
    server_port: int = 8000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("supabase_url", "supabase_service_key", mode="before")
    @classmethod
    def _empty_str_to_none(cls, v: object) -> object:
        """Empty string from ENV -> None."""
        if isinstance(v, str) and v.strip() == "":
            return None
        return v

    @field_validator("conversation_ttl_seconds", "active_workout_ttl_seconds")
    @classmethod
    def _positive_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("TTL must be a positive number of seconds")
        return v


# Global settings instance
settings = ServiceSettings()
