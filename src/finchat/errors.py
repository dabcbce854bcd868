from __future__ import annotations


class FinchatError(Exception):
    """Base class for every error raised by finchat collaborators."""

    def __init__(self, message: str, *, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class GenerationError(FinchatError):
    """The generation service failed (timeout, quota, malformed response)."""


class TranslationError(FinchatError):
    """The translation service failed. Always recovered by the translator."""


class PersistenceError(FinchatError):
    """A transcript read or write failed. Always recovered by the controller."""


class ValidationError(FinchatError):
    """A send was rejected (empty input or a send already in flight)."""
