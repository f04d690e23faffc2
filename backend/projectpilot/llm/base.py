"""
LLM Provider Base Class

Abstract interface that all LLM providers must implement.
Includes schema-constrained JSON extraction and the failure hierarchy.
"""
from abc import ABC, abstractmethod
from typing import Optional, TypeVar
import json
import logging

from pydantic import BaseModel, ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class LLMFailure(Exception):
    """Base exception for LLM failures. Carries no partial data."""
    pass


class LLMRateLimitError(LLMFailure):
    """Rate limit exceeded."""
    pass


class LLMInvalidResponseError(LLMFailure):
    """Response was not valid JSON or did not match the schema."""
    pass


class LLMTimeoutError(LLMFailure):
    """No response within the client-side timeout."""
    pass


# Providers back off and retry on rate limiting only; everything else
# surfaces to the gateway on the first failure.
retry_on_rate_limit = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(LLMRateLimitError),
    reraise=True,
)


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences some models wrap around JSON."""
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    if cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


class LLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    All LLM calls go through this interface, allowing
    provider switching without changing system logic.
    """

    @abstractmethod
    async def generate_text(
        self,
        prompt: str,
        model: str,
        max_tokens: int = 2048,
        temperature: float = 0.7,
        system_prompt: Optional[str] = None,
        json_output: bool = False,
    ) -> str:
        """
        Generate text from a prompt.

        Args:
            prompt: The user prompt
            model: Model name to use
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature
            system_prompt: Optional system prompt
            json_output: Ask the model for a bare JSON document

        Returns:
            Generated text

        Raises:
            LLMFailure: On any transport or API error
        """
        pass

    async def extract_json(
        self,
        prompt: str,
        schema: type[SchemaT],
        model: str,
        max_tokens: int = 4096,
        temperature: float = 0.4,
        system_prompt: Optional[str] = None,
        max_retries: int = 2,
    ) -> SchemaT:
        """
        Extract structured JSON from a prompt.

        Retries when the model returns invalid JSON or JSON that does
        not match the schema. Transport errors are not retried here;
        providers retry those themselves.

        Args:
            prompt: The user prompt
            schema: Pydantic model to validate against
            model: Model name to use
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature (lower for structured output)
            system_prompt: Optional system prompt
            max_retries: Number of attempts for invalid output

        Returns:
            Validated schema instance

        Raises:
            LLMInvalidResponseError: If no attempt produced a valid document
            LLMFailure: On transport errors
        """
        json_system = (system_prompt or "") + """

You must respond with valid JSON only. No markdown, no explanations.
The JSON must match this schema:
""" + json.dumps(schema.model_json_schema(by_alias=True), indent=2)

        last_error: Optional[LLMFailure] = None
        for attempt in range(max(1, max_retries)):
            response = await self.generate_text(
                prompt=prompt,
                model=model,
                max_tokens=max_tokens,
                temperature=temperature,
                system_prompt=json_system,
                json_output=True,
            )

            try:
                parsed = json.loads(strip_code_fences(response))
                return schema.model_validate(parsed)

            except json.JSONDecodeError as e:
                last_error = LLMInvalidResponseError(f"Invalid JSON: {e}")
                logger.warning(f"JSON parse error on attempt {attempt + 1}: {e}")

            except ValidationError as e:
                last_error = LLMInvalidResponseError(f"Schema validation failed: {e}")
                logger.warning(
                    f"Schema validation error on attempt {attempt + 1}: "
                    f"{e.error_count()} error(s)"
                )

        raise last_error or LLMInvalidResponseError("Failed to extract valid JSON")
