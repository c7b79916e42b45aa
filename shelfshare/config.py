"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - secret_key has no default: Settings() fails without SECRET_KEY in env or .env
    - The signing key length itself is enforced by TokenService at startup
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - Non-secret settings default to the docker-compose deployment
    - CORS_ORIGINS may be a JSON list or a comma-separated string
"""

from functools import lru_cache
import json
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    app_env: Literal["development", "test", "production"] = "production"

    database_url: str = "postgresql+asyncpg://shelfshare:shelfshare@db:5432/shelfshare"
    database_pool_size: int = Field(20, ge=1)
    database_max_overflow: int = Field(10, ge=0)

    secret_key: str
    token_ttl_seconds: int = Field(86_400, gt=0)

    cors_origins: Annotated[list[str], NoDecode] = ["http://localhost:5173"]

    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    @field_validator("database_url", mode="before")
    @classmethod
    def use_asyncpg_driver(cls, v: str) -> str:
        """Hosted Postgres hands out postgresql:// URLs; the async engine needs asyncpg."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return "postgresql+asyncpg://" + v[len("postgresql://"):]
        return v

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, v):
        if isinstance(v, str):
            v = v.strip()
            if v.startswith("["):
                return json.loads(v)
            return [o.strip() for o in v.split(",") if o.strip()]
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
