# LLM Providers
from .base import (
    LLMProvider,
    LLMFailure,
    LLMRateLimitError,
    LLMInvalidResponseError,
    LLMTimeoutError,
)
from .openai_provider import OpenAIProvider
from .gemini_provider import GeminiProvider
from .router import get_llm_provider, ModelTier, get_model_for_task
from .gateway import ConsultancyGateway

__all__ = [
    "LLMProvider",
    "LLMFailure",
    "LLMRateLimitError",
    "LLMInvalidResponseError",
    "LLMTimeoutError",
    "OpenAIProvider",
    "GeminiProvider",
    "get_llm_provider",
    "ModelTier",
    "get_model_for_task",
    "ConsultancyGateway",
]
