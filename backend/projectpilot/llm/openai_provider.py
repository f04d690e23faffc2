"""
OpenAI LLM Provider

Chat Completions with JSON mode for structured calls.
"""
from typing import Optional
import logging

from openai import APITimeoutError, AsyncOpenAI, OpenAIError, RateLimitError

from .base import LLMProvider, LLMFailure, LLMRateLimitError, LLMTimeoutError, retry_on_rate_limit
from ..config import settings

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """OpenAI API implementation."""

    def __init__(self):
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required for OpenAI provider")
        # Retries are handled by tenacity and the gateway, not the SDK
        self.client = AsyncOpenAI(api_key=settings.openai_api_key, max_retries=0)

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
        messages = [{"role": "user", "content": prompt}]
        if system_prompt:
            messages.insert(0, {"role": "system", "content": system_prompt})

        kwargs = {}
        if json_output:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
                **kwargs,
            )
        except RateLimitError as e:
            logger.warning(f"OpenAI rate limited on {model}")
            raise LLMRateLimitError(f"OpenAI rate limit: {e}") from e
        except APITimeoutError as e:
            raise LLMTimeoutError(f"OpenAI request timed out: {e}") from e
        except OpenAIError as e:
            raise LLMFailure(f"OpenAI error: {e}") from e

        if not response.choices:
            raise LLMFailure("OpenAI returned no choices")
        return response.choices[0].message.content or ""
