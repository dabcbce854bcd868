from typing import Protocol, runtime_checkable

from loguru import logger
from tenacity import retry_if_exception_type, stop_after_attempt, wait_exponential

from finchat.errors import GenerationError


@runtime_checkable
class GenerationClient(Protocol):
    async def generate(self, prompt: str) -> str:
        """Return generated text for ``prompt``.

        Raises GenerationError on any upstream failure. Implementations do
        not retry.
        """
        ...


def create_generation_client(
    provider_name: str,
    api_key: str,
    *,
    model: str,
    max_tokens: int,
    temperature: float,
    timeout_seconds: float,
) -> GenerationClient:
    """Factory: create a GenerationClient by provider name."""
    name = provider_name.strip().lower()
    if name == "anthropic":
        from finchat.providers.anthropic_provider import AnthropicGenerationClient
        return AnthropicGenerationClient(
            api_key,
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
            timeout_seconds=timeout_seconds,
        )
    if name == "openai":
        from finchat.providers.openai_provider import OpenAIGenerationClient
        return OpenAIGenerationClient(
            api_key,
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
            timeout_seconds=timeout_seconds,
        )
    raise ValueError(f"Unknown provider: {provider_name!r}. Supported: 'anthropic', 'openai'")


def _on_retry(retry_state) -> None:
    attempt = retry_state.attempt_number
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    reason = type(exc).__name__ if exc else "Unknown"
    logger.warning(f"{reason}. Retrying generation in {wait:.1f}s (attempt {attempt})...")


def generation_retry_kwargs(retries: int, *, wait_seconds: float = 1.0) -> dict:
    """tenacity kwargs for caller-side generation retries (``retries`` extra attempts)."""
    return {
        "retry": retry_if_exception_type(GenerationError),
        "wait": wait_exponential(multiplier=wait_seconds, min=0, max=max(wait_seconds, 0) * 30),
        "stop": stop_after_attempt(max(0, retries) + 1),
        "before_sleep": _on_retry,
        "reraise": True,
    }
