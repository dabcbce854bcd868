from __future__ import annotations

from typing import Protocol, runtime_checkable

import httpx
from loguru import logger

from finchat.errors import TranslationError
from finchat.i18n import DEFAULT_LANGUAGE, primary_language

_TRANSLATE_URL = "https://translate.googleapis.com/translate_a/single"
_TIMEOUT_SECONDS = 10


@runtime_checkable
class TranslationClient(Protocol):
    async def translate(self, text: str, target_language: str) -> str:
        """Return ``text`` in ``target_language``, or ``text`` unchanged on failure."""
        ...


class PassthroughTranslator:
    async def translate(self, text: str, target_language: str) -> str:
        return text


def parse_translation_payload(data: object) -> str:
    """Rebuild the translated text from the endpoint's nested-array payload.

    The first top-level group holds one entry per translated segment; the
    first element of each entry is the segment's text.
    """
    if not isinstance(data, list) or not data or not isinstance(data[0], list):
        raise TranslationError("Malformed translation payload: missing segment group")
    parts: list[str] = []
    for entry in data[0]:
        if not isinstance(entry, list) or not entry:
            raise TranslationError("Malformed translation payload: bad segment entry")
        segment = entry[0]
        if segment is None:
            continue
        parts.append(str(segment))
    return "".join(parts)


class HttpTranslationClient:
    def __init__(
        self,
        *,
        source_language: str = DEFAULT_LANGUAGE,
        timeout_seconds: float = _TIMEOUT_SECONDS,
        url: str = _TRANSLATE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._source_language = primary_language(source_language)
        self._timeout_seconds = timeout_seconds
        self._url = url
        self._transport = transport

    @property
    def source_language(self) -> str:
        return self._source_language

    async def translate(self, text: str, target_language: str) -> str:
        if primary_language(target_language) == self._source_language:
            return text
        if not text.strip():
            return text
        try:
            return await self._request(text, target_language)
        except TranslationError as ex:
            logger.warning(f"Translation to {target_language!r} failed, keeping original text: {ex}")
            return text

    async def _request(self, text: str, target_language: str) -> str:
        params = {"client": "gtx", "sl": "auto", "tl": target_language, "dt": "t", "q": text}
        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds, transport=self._transport) as client:
                response = await client.get(self._url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as ex:
            raise TranslationError(f"HTTP error from translation service: {ex}", original_error=ex) from ex
        except ValueError as ex:
            raise TranslationError("Translation service returned invalid JSON", original_error=ex) from ex
        return parse_translation_payload(data)
