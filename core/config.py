"""Centralised engine configuration using Pydantic settings."""
from __future__ import annotations

from functools import lru_cache
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_DEFAULT_DB_PATH = _PROJECT_ROOT / "database" / "compliance_engine.db"


class NarrativeSettings(BaseModel):
    """Settings for the external text-generation collaborator."""

    enabled: bool = False
    api_url: Optional[str] = None
    api_key: Optional[str] = None
    model: str = "gpt-4o"
    timeout_seconds: float = 20.0
    max_tokens: int = 1000


class AppConfig(BaseSettings):
    """Engine configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    database_url: str = Field(  # type: ignore[assignment]
        default=None,
        alias="DATABASE_URL",
        validate_default=True,
    )
    requirement_catalog_path: Optional[Path] = Field(default=None, alias="REQUIREMENT_CATALOG_PATH")
    fetch_max_workers: int = Field(default=4, ge=1, alias="FETCH_MAX_WORKERS")
    narrative_enabled: bool = Field(default=False, alias="NARRATIVE_ENABLED")
    narrative_api_url: Optional[str] = Field(default=None, alias="NARRATIVE_API_URL")
    narrative_api_key: Optional[str] = Field(default=None, alias="NARRATIVE_API_KEY")
    narrative_model: str = Field(default="gpt-4o", alias="NARRATIVE_MODEL")
    narrative_timeout_seconds: float = Field(default=20.0, gt=0, alias="NARRATIVE_TIMEOUT_SECONDS")
    narrative_max_tokens: int = Field(default=1000, gt=0, alias="NARRATIVE_MAX_TOKENS")

    @field_validator("database_url", mode="before")
    @classmethod
    def _fallback_to_legacy_path(cls, value: Optional[str]) -> str:
        if value and str(value).strip():
            return str(value)
        legacy_path = os.getenv("COMPLIANCE_ENGINE_DB_PATH")
        if legacy_path:
            path = Path(legacy_path).expanduser()
            return f"sqlite:///{path.as_posix()}"
        return f"sqlite:///{_DEFAULT_DB_PATH.as_posix()}"

    @field_validator("requirement_catalog_path", mode="before")
    @classmethod
    def _blank_catalog_path(cls, value: Optional[str | Path]) -> Optional[str | Path]:
        if value is None or not str(value).strip():
            return None
        return value

    @computed_field
    def narrative(self) -> NarrativeSettings:
        """Return strongly-typed narrative provider settings."""

        return NarrativeSettings(
            enabled=self.narrative_enabled,
            api_url=self.narrative_api_url,
            api_key=self.narrative_api_key,
            model=self.narrative_model,
            timeout_seconds=self.narrative_timeout_seconds,
            max_tokens=self.narrative_max_tokens,
        )


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Load configuration, caching the result for reuse."""

    return AppConfig()  # type: ignore[call-arg]


__all__ = ["AppConfig", "NarrativeSettings", "get_config"]
