"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

import math
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


PRODUCTION_ORIGINS = [
    "https://bracuout-std4.vercel.app",
    "https://bracuout-backend-dckn.vercel.app",
    "https://bracuout-backend-dckn-2jodwphfi-tarannum-al-akidas-projects.vercel.app",
]
DEVELOPMENT_ORIGINS = ["http://localhost:3000"]


class Settings(BaseSettings):
    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017/campus_recruitment"
    mongodb_db: str = "campus_recruitment"
    mongodb_server_selection_timeout_ms: int = 5000
    mongodb_socket_timeout_ms: int = 45000
    mongodb_connect_timeout_ms: int = 10000

    # Rate limiting (unset -> environment defaults)
    rate_limit_window_ms: Optional[int] = None
    rate_limit_max_requests: Optional[int] = None

    # App
    environment: str = "development"
    deployment_mode: Literal["server", "serverless"] = "server"
    port: int = 5000
    upload_dir: str = "uploads"
    max_body_size_mb: int = 10
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def cors_origins(self) -> List[str]:
        """Origins allowed to call the API with credentials."""
        return PRODUCTION_ORIGINS if self.is_production else DEVELOPMENT_ORIGINS

    @property
    def rate_limit_window_seconds(self) -> float:
        if self.rate_limit_window_ms:
            return self.rate_limit_window_ms / 1000
        return 15 * 60

    @property
    def rate_limit_max(self) -> int:
        if self.rate_limit_max_requests:
            return self.rate_limit_max_requests
        return 100 if self.is_production else 1000

    @property
    def rate_limit_retry_after_minutes(self) -> int:
        return math.ceil(self.rate_limit_window_seconds / 60)

    @property
    def strict_rate_limit_max(self) -> int:
        return 10 if self.is_production else 50

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
