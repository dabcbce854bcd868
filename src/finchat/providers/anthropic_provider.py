import anthropic
from loguru import logger

from finchat.errors import GenerationError
from finchat.providers.common import generation_errors, require_text


class AnthropicGenerationClient:
    def __init__(
        self,
        api_key: str,
        *,
        model: str,
        max_tokens: int,
        temperature: float,
        timeout_seconds: float,
    ):
        self._client = anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout_seconds, max_retries=0)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def generate(self, prompt: str) -> str:
        logger.debug(f"API request: model={self._model}, max_tokens={self._max_tokens}, prompt_chars={len(prompt)}")
        with generation_errors("Anthropic", (anthropic.APIError,)):
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                messages=[{"role": "user", "content": prompt}],
            )

        usage = response.usage
        logger.debug(
            f"API response: stop_reason={response.stop_reason}, "
            f"input_tokens={usage.input_tokens}, output_tokens={usage.output_tokens}"
        )

        try:
            text = "".join(block.text for block in response.content if block.type == "text")
        except AttributeError as ex:
            raise GenerationError("Anthropic returned a malformed response", original_error=ex) from ex
        return require_text(text, "Anthropic")
