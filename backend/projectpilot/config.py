"""
ProjectPilot Configuration

Settings come from the environment (or a .env file). The API key for the
selected provider is checked once at startup so a missing key fails the
boot instead of the first consultancy turn.
"""
from typing import Literal
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

Provider = Literal["openai", "gemini"]
Tier = Literal["cheap", "mid", "heavy"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    llm_provider: Provider = "gemini"
    openai_api_key: str = ""
    gemini_api_key: str = ""

    # Key-value store holding the project document and the chat log
    database_url: str = "sqlite+aiosqlite:///./projectpilot.db"

    debug: bool = False
    follow_through: bool = False

    # Gateway
    llm_timeout_seconds: float = Field(60.0, gt=0)
    llm_max_retries: int = Field(2, ge=1)
    history_window: int = Field(4, ge=0)

    # Tier used by each gateway call; override with PROJECT_CREATION_TIER / NEXT_STEP_TIER
    project_creation_tier: Tier = "mid"
    next_step_tier: Tier = "mid"

    # Model names per provider and tier
    openai_heavy_model: str = "gpt-4o"
    openai_mid_model: str = "gpt-4o"
    openai_cheap_model: str = "gpt-4o-mini"
    gemini_heavy_model: str = "gemini-2.5-pro"
    gemini_mid_model: str = "gemini-2.5-flash"
    gemini_cheap_model: str = "gemini-2.0-flash"

    @field_validator("openai_api_key", "gemini_api_key", mode="before")
    @classmethod
    def drop_placeholder_keys(cls, v: str) -> str:
        """Treat copied .env.example values like 'your-key-here' as unset."""
        if v and "your-" in v.lower():
            return ""
        return v

    @property
    def provider_api_key(self) -> str:
        return getattr(self, f"{self.llm_provider}_api_key")

    def validate_provider_key(self) -> None:
        """Raise ValueError if the selected provider has no API key."""
        if not self.provider_api_key:
            env_name = f"{self.llm_provider.upper()}_API_KEY"
            raise ValueError(
                f"{env_name} is required when LLM_PROVIDER={self.llm_provider}. "
                "Set it in the environment or in .env."
            )

    def get_model(self, tier: Tier) -> str:
        """Model name for ``tier`` on the selected provider."""
        return getattr(self, f"{self.llm_provider}_{tier}_model")


settings = Settings()
