from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from loguru import logger

from finchat.errors import GenerationError


@contextmanager
def generation_errors(provider_name: str, exception_types: tuple[type[Exception], ...]) -> Iterator[None]:
    """Re-raise SDK failures as GenerationError."""
    try:
        yield
    except exception_types as ex:
        logger.warning(f"{provider_name} generation failed: {type(ex).__name__}: {ex}")
        raise GenerationError(f"{provider_name} generation failed", original_error=ex) from ex


def require_text(text: str | None, provider_name: str) -> str:
    if text is None or not text.strip():
        raise GenerationError(f"{provider_name} returned an empty response")
    return text
