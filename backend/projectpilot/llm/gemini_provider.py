"""
Google Gemini LLM Provider
"""
from typing import Optional
import logging

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from .base import LLMProvider, LLMFailure, LLMRateLimitError, LLMTimeoutError, retry_on_rate_limit
from ..config import settings

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """Gemini through the google-generativeai SDK."""

    def __init__(self):
        if not settings.gemini_api_key:
            raise ValueError("GEMINI_API_KEY is required for Gemini provider")
        genai.configure(api_key=settings.gemini_api_key)

    @retry_on_rate_limit
    async def generate_text(
        self,
        prompt: str,
        model: str,
        max_tokens: int = 2048,
        temperature: float = 0.7,
        system_prompt: Optional[str] = None,
        json_output: bool = False,
    ) -> str:
        gen_model = genai.GenerativeModel(
            model_name=model,
            system_instruction=system_prompt or None,
        )
        config = genai.GenerationConfig(
            max_output_tokens=max_tokens,
            temperature=temperature,
            response_mime_type="application/json" if json_output else None,
        )

        try:
            response = await gen_model.generate_content_async(prompt, generation_config=config)
        except google_exceptions.ResourceExhausted as e:
            logger.warning(f"Gemini rate limited on {model}")
            raise LLMRateLimitError(f"Gemini rate limit: {e}") from e
        except google_exceptions.DeadlineExceeded as e:
            raise LLMTimeoutError(f"Gemini deadline exceeded: {e}") from e
        except Exception as e:
            raise LLMFailure(f"Gemini error: {e}") from e

        # .text raises when the candidate was blocked or empty
        try:
            return response.text or ""
        except ValueError as e:
            raise LLMFailure(f"Gemini returned no text: {e}") from e
