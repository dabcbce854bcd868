import openai
from loguru import logger

from finchat.errors import GenerationError
from finchat.providers.common import generation_errors, require_text


class OpenAIGenerationClient:
    def __init__(
        self,
        api_key: str,
        *,
        model: str,
        max_tokens: int,
        temperature: float,
        timeout_seconds: float,
    ):
        self._client = openai.AsyncOpenAI(api_key=api_key, timeout=timeout_seconds, max_retries=0)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def generate(self, prompt: str) -> str:
        logger.debug(f"API request: model={self._model}, max_tokens={self._max_tokens}, prompt_chars={len(prompt)}")
        with generation_errors("OpenAI", (openai.OpenAIError,)):
            response = await self._client.chat.completions.create(
                model=self._model,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                messages=[{"role": "user", "content": prompt}],
            )

        try:
            choice = response.choices[0]
        except (IndexError, TypeError) as ex:
            raise GenerationError("OpenAI returned no choices", original_error=ex) from ex

        text = choice.message.content or ""
        logger.debug(f"API response: finish_reason={choice.finish_reason}, len={len(text)}")
        return require_text(text, "OpenAI")
