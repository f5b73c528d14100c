"""Application configuration."""
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(ValueError):
    """Settings do not support the selected dialogue profile."""


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Azure Communication Services
    acs_connection_string: str
    cognitive_service_endpoint: str
    callback_base_url: str  # Public URL (dev tunnel) ACS posts callbacks to

    # OpenAI / Azure OpenAI
    openai_api_key: str
    azure_openai_endpoint: Optional[str] = None
    azure_openai_api_version: str = "2024-06-01"
    openai_model: str = "gpt-4o-mini"  # Deployment name when using Azure

    # Document search tool
    document_search_endpoint: Optional[str] = None
    document_search_api_key: Optional[str] = None
    document_search_entity_types: List[str] = ["document"]

    # Dialogue
    dialogue_profile: str = "weather"
    profiles_file: Optional[str] = None
    max_silence_retries: int = Field(default=2, ge=0)
    max_tool_rounds: int = Field(default=5, ge=0)

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()
