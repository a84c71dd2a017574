"""Application settings loaded from environment variables."""
from typing import List
from pathlib import Path
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# .env lives at the repository root
ENV_FILE = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Property-Marketplace"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    # Database
    database_url: str
    database_url_sync: str
    api_key: str = ""

    # Analytics / tools
    estimated_rental_return: float = 0.008   # annual rent as a fraction of price
    income_multiplier: float = 3.5           # recommended income = payment * multiplier
    nearby_default_radius_km: float = 5.0

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v):
        if not v.startswith(('postgresql+asyncpg://', 'sqlite+aiosqlite://')):
            raise ValueError('database_url must use async driver')
        return v

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            import json
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        if not v:
            import warnings
            warnings.warn(
                "API_KEY not configured; write endpoints will reject every request.",
                stacklevel=2,
            )
        return v


settings = Settings()
