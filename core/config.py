from functools import lru_cache
from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_name: str = "Timeline of Me"
    app_version: str = "1.0.0"
    debug: bool = False

    # Security
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 480  # 8 hours

    # CORS - comma-separated list of allowed origins
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Entry store
    entry_store: str = "cosmos"  # Options: "cosmos", "sql"
    cosmos_endpoint: str = ""
    cosmos_key: str = ""
    cosmos_database: str = "timeline-db"
    cosmos_container: str = "timeline-entries"
    database_url: Optional[str] = None  # Required for sql store
    database_echo: bool = False

    # Blob storage
    azure_storage_account: str = ""
    azure_storage_key: str = ""
    azure_storage_connection_string: Optional[str] = None  # e.g. Azurite
    azure_storage_container: str = "timeline-media"
    media_url_ttl_hours: int = 1  # Lifetime of read SAS URLs handed to clients
    max_upload_size: int = 50 * 1024 * 1024  # 50MB default

    # Cognitive services
    cognitive_text_endpoint: str = ""
    cognitive_text_key: str = ""
    cognitive_vision_endpoint: str = ""
    cognitive_vision_key: str = ""
    cognitive_speech_key: str = ""
    cognitive_speech_region: str = ""
    cognitive_speech_language: str = "en-US"
    cognitive_timeout_seconds: float = 30.0

    # Redis Cache
    redis_enabled: bool = True  # Enable/disable caching
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[str] = None

    # Cache TTL (Time-To-Live) in seconds
    cache_ttl_analysis: int = 86400  # 24 hours

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_ai: str = "30/minute"

    @model_validator(mode="after")
    def validate_entry_store_config(self) -> "Settings":
        """Validate entry store configuration"""
        if self.entry_store == "sql":
            if not self.database_url:
                raise ValueError(
                    "database_url is required when entry_store is 'sql'. "
                    "Set DATABASE_URL environment variable or update .env file."
                )
        elif self.entry_store != "cosmos":
            raise ValueError(
                f"Invalid entry_store '{self.entry_store}'. "
                f"Must be one of: 'cosmos', 'sql'"
            )
        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
        case_sensitive=False,
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
