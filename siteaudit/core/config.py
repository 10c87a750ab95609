"""
Configuration management for siteaudit.

Provides centralized, validated configuration from environment variables
with proper type checking and defaults.
"""

from __future__ import annotations

from typing import Annotated, Dict, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _parse_bool(v) -> bool:
    if isinstance(v, str):
        return v.strip().lower() in ("1", "true", "yes", "y")
    return bool(v)


class ClassifierConfig(BaseSettings):
    """Business classification thresholds."""

    high_confidence_score: float = Field(default=2.0, alias="CLASSIFIER_HIGH_SCORE")
    medium_confidence_score: float = Field(default=1.0, alias="CLASSIFIER_MEDIUM_SCORE")

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")


class KeywordConfig(BaseSettings):
    """Keyword generation, filtering and ranking configuration."""

    relevance_threshold: float = Field(default=0.5, alias="KEYWORD_RELEVANCE_THRESHOLD")
    branded_cap: int = Field(default=20, alias="KEYWORD_BRANDED_CAP")
    non_branded_cap: int = Field(default=30, alias="KEYWORD_NON_BRANDED_CAP")
    top_cap: int = Field(default=20, alias="KEYWORD_TOP_CAP")
    content_keyword_limit: int = Field(default=50, alias="KEYWORD_CONTENT_LIMIT")

    # External enrichment budget
    serp_branded_limit: int = Field(default=5, alias="SERP_BRANDED_LIMIT")
    serp_non_branded_limit: int = Field(default=8, alias="SERP_NON_BRANDED_LIMIT")
    batch_size: int = Field(default=3, alias="PROVIDER_BATCH_SIZE")
    batch_delay_seconds: float = Field(default=0.3, alias="PROVIDER_BATCH_DELAY")

    country: str = Field(default="gb", alias="KEYWORD_COUNTRY")

    @field_validator("relevance_threshold", mode="before")
    @classmethod
    def clamp_threshold(cls, v):
        # Non-branded cutoff stays within the 0.4-0.6 operating range
        value = float(v)
        return min(max(value, 0.4), 0.6)

    @field_validator("batch_size", mode="before")
    @classmethod
    def clamp_batch_size(cls, v):
        return min(max(int(v), 1), 5)

    @field_validator("country", mode="before")
    @classmethod
    def normalize_country(cls, v):
        return (v or "gb").strip().lower()

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")


class ProviderConfig(BaseSettings):
    """External data provider credentials and switches."""

    keywords_everywhere_api_key: Optional[str] = Field(
        default=None, alias="KEYWORDS_EVERYWHERE_API_KEY"
    )
    valueserp_api_key: Optional[str] = Field(default=None, alias="VALUESERP_API_KEY")
    companies_house_api_key: Optional[str] = Field(default=None, alias="COMPANIES_HOUSE_API_KEY")
    suggestions_enabled: bool = Field(default=True, alias="SUGGESTIONS_ENABLED")
    disabled_providers: Annotated[List[str], NoDecode] = Field(default_factory=list, alias="DISABLED_PROVIDERS")
    request_timeout: float = Field(default=30.0, alias="REQUEST_TIMEOUT")

    @field_validator("suggestions_enabled", mode="before")
    @classmethod
    def parse_suggestions_enabled(cls, v):
        return _parse_bool(v)

    @field_validator("disabled_providers", mode="before")
    @classmethod
    def parse_disabled_providers(cls, v):
        if isinstance(v, str):
            return [p.strip().lower() for p in v.split(",") if p.strip()]
        return v or []

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")


class Settings(BaseSettings):
    """Main application settings."""

    environment: str = Field(default="production", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")

    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    keywords: KeywordConfig = Field(default_factory=KeywordConfig)
    providers: ProviderConfig = Field(default_factory=ProviderConfig)

    @field_validator("debug", mode="before")
    @classmethod
    def parse_debug(cls, v):
        return _parse_bool(v)

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def validate_provider_settings(config: Optional[Settings] = None) -> List[str]:
    """
    List provider credentials that are missing.

    A missing key does not stop an analysis; the matching enrichment is skipped
    and its fields stay empty.
    """
    config = config or get_settings()
    missing = []
    if not config.providers.keywords_everywhere_api_key:
        missing.append("KEYWORDS_EVERYWHERE_API_KEY")
    if not config.providers.valueserp_api_key:
        missing.append("VALUESERP_API_KEY")
    if not config.providers.companies_house_api_key:
        missing.append("COMPANIES_HOUSE_API_KEY")
    return missing


def provider_status(config: Optional[Settings] = None) -> Dict[str, str]:
    """Summarise which providers an analysis would use."""
    config = config or get_settings()
    disabled = set(config.providers.disabled_providers)

    def state(name: str, configured: bool) -> str:
        if name in disabled:
            return "disabled"
        return "available" if configured else "unavailable"

    return {
        "volume": state("volume", bool(config.providers.keywords_everywhere_api_key)),
        "serp": state("serp", bool(config.providers.valueserp_api_key)),
        "suggestions": state("suggestions", config.providers.suggestions_enabled),
        "registry": state("registry", bool(config.providers.companies_house_api_key)),
    }
