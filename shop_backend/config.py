"""
Configuration and settings for the shop backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    graphql_path: str = Field(default="/graphql")

    # Database (any SQLAlchemy URL); unset means in-memory
    database_url: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)
    seed_on_startup: bool = Field(default=False)

    # Landing page and static assets
    docs_path: str = Field(default="api.md")
    static_dir: str = Field(default="public")

    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    log_level: str = Field(default="INFO")

    # Number of documents generated per collection on reset
    seed_users: int = Field(default=20, ge=0)
    seed_tasks: int = Field(default=20, ge=0)
    seed_products: int = Field(default=30, ge=0)
    seed_baskets: int = Field(default=5, ge=0)

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)

    def seed_counts(self) -> dict[str, int]:
        return {
            "users": self.seed_users,
            "products": self.seed_products,
            "tasks": self.seed_tasks,
            "baskets": self.seed_baskets,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
