from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import Optional
import os
from pathlib import Path


class Settings(BaseSettings):
    """Application settings - reads from environment variables"""

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_key: str = ""
    db_schema: str = "public"
    media_bucket: str = "media-assets"

    # Rate limit counter store (Redis). Empty -> in-process store (dev only)
    redis_url: Optional[str] = None

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 8080

    # Seconds before a call to Supabase / Redis is abandoned
    external_call_timeout: float = 10.0

    # Environment
    env: str = "development"
    debug: bool = False

    @field_validator('redis_url', mode='before')
    @classmethod
    def empty_redis_url(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def is_production_like(self) -> bool:
        return self.env.lower() in ("production", "staging")

    @property
    def service_key(self) -> str:
        return self.supabase_service_key or self.supabase_key

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env" if Path(".env").exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,  # SUPABASE_URL == supabase_url
    )


# Create settings instance
settings = Settings()

if os.getenv("DEBUG", "").lower() == "true":
    print(f"Settings loaded:")
    print(f"  SUPABASE_URL: {'set' if settings.supabase_url else 'MISSING'}")
    print(f"  SUPABASE_KEY: {'set' if settings.service_key else 'MISSING'}")
    print(f"  REDIS_URL: {'set' if settings.redis_url else 'in-process'}")
