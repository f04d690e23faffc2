"""
LLM Router

Picks the provider from LLM_PROVIDER and the model for each gateway call.
"""
from enum import Enum
from typing import Dict, Optional, Type
import logging

from .base import LLMProvider
from .openai_provider import OpenAIProvider
from .gemini_provider import GeminiProvider
from ..config import settings

logger = logging.getLogger(__name__)


class ModelTier(str, Enum):
    """Model tiers based on cost and capability."""
    CHEAP = "cheap"
    MID = "mid"
    HEAVY = "heavy"


PROVIDERS: Dict[str, Type[LLMProvider]] = {
    "openai": OpenAIProvider,
    "gemini": GeminiProvider,
}

# Gateway tasks and the setting that picks their tier
TASK_TIER_SETTINGS: Dict[str, str] = {
    "project_creation": "project_creation_tier",
    "next_step": "next_step_tier",
}

_provider_instance: Optional[LLMProvider] = None


def get_llm_provider() -> LLMProvider:
    """Shared provider instance for the configured LLM_PROVIDER."""
    global _provider_instance

    if _provider_instance is None:
        settings.validate_provider_key()
        provider_cls = PROVIDERS.get(settings.llm_provider)
        if provider_cls is None:
            raise ValueError(f"Unknown LLM provider: {settings.llm_provider}")
        logger.info(f"Initializing {provider_cls.__name__}")
        _provider_instance = provider_cls()

    return _provider_instance


def get_tier_for_task(task: str) -> ModelTier:
    """Configured tier for a gateway task; unknown tasks use MID."""
    setting = TASK_TIER_SETTINGS.get(task)
    if setting is None:
        return ModelTier.MID
    return ModelTier(getattr(settings, setting))


def get_model_for_task(task: str) -> str:
    """Model name for a gateway task on the configured provider."""
    return settings.get_model(get_tier_for_task(task).value)
