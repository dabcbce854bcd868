from __future__ import annotations

import asyncio
from dataclasses import replace

from loguru import logger
from tenacity import AsyncRetrying

from finchat import i18n
from finchat.connectivity import ConnectivityMonitor
from finchat.errors import GenerationError, PersistenceError, TranslationError, ValidationError
from finchat.generation import GenerationClient, generation_retry_kwargs
from finchat.memory.transcript_store import TranscriptStore
from finchat.models import FinancialSnapshot, Message, Sender, Session, is_guest
from finchat.prompt_builder import build_prompt
from finchat.translation import TranslationClient


class SessionController:
    """Owns one conversational session and drives every send through
    prompt building, generation, translation and persistence.

    At most one send is in flight at a time; a send started while another
    is running, or with blank text, is ignored.
    """

    def __init__(
        self,
        *,
        store: TranscriptStore,
        generator: GenerationClient,
        translator: TranslationClient,
        monitor: ConnectivityMonitor | None = None,
        default_language: str = i18n.DEFAULT_LANGUAGE,
        generation_retries: int = 0,
        retry_wait_seconds: float = 1.0,
    ):
        self._store = store
        self._generator = generator
        self._translator = translator
        self._monitor = monitor
        self._generation_retries = max(0, generation_retries)
        self._retry_wait_seconds = retry_wait_seconds
        self._session = Session(identity=None, language_preference=default_language)
        self._pending_writes: set[asyncio.Task] = set()

    @property
    def session(self) -> Session:
        return self._session

    @property
    def transcript(self) -> tuple[Message, ...]:
        return tuple(self._session.transcript)

    @property
    def send_in_flight(self) -> bool:
        return self._session.send_in_flight

    @property
    def language(self) -> str:
        return self._session.language_preference

    @property
    def is_online(self) -> bool:
        return self._monitor is None or self._monitor.is_online

    @property
    def degraded(self) -> bool:
        return not self.is_online

    def set_language(self, language: str) -> None:
        self._session.language_preference = language
        if self._monitor is not None:
            self._monitor.set_language(language)

    async def load(self, identity: str | None) -> list[Message]:
        session = Session(identity=identity, language_preference=self._session.language_preference)
        self._session = session

        history: list[Message] = []
        if not is_guest(identity):
            try:
                history = await self._store.load_history(identity)
            except PersistenceError as ex:
                logger.warning(f"Transcript store unavailable, starting fresh for {session.user_id}: {ex}")
            except Exception as ex:
                logger.error(f"Unexpected error loading history for {session.user_id}: {ex}")

        if history:
            session.transcript = list(history)
            logger.info(f"Loaded {len(history)} persisted messages for {session.user_id}")
        else:
            session.transcript = [self._greeting(session.language_preference)]
        return list(session.transcript)

    async def send_user_message(
        self,
        text: str,
        snapshot: FinancialSnapshot | None,
        language: str | None = None,
    ) -> list[Message]:
        session = self._session
        try:
            self._validate(session, text)
        except ValidationError as ex:
            logger.debug(f"Send ignored: {ex.message}")
            return []

        language = language or session.language_preference
        session.send_in_flight = True
        try:
            history = tuple(session.transcript)
            user_message = self._append(session, Message(text=text, sender=Sender.USER, language=language))
            self._persist(session, user_message)

            prompt = build_prompt(snapshot, history, text, language)
            reply = await self._respond(prompt, language)

            assistant_message = self._append(
                session, Message(text=reply, sender=Sender.ASSISTANT, language=language)
            )
            self._persist(session, assistant_message)
            return [user_message, assistant_message]
        finally:
            session.send_in_flight = False

    async def flush(self) -> None:
        """Wait for every outstanding persistence write to finish."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes))

    def _validate(self, session: Session, text: str) -> None:
        if not text or not text.strip():
            raise ValidationError("empty input")
        if session.send_in_flight:
            raise ValidationError("a send is already in flight")

    def _greeting(self, language: str) -> Message:
        return Message(text=i18n.t("chatbot.welcomeMessage", language), sender=Sender.ASSISTANT, language=language)

    def _append(self, session: Session, message: Message) -> Message:
        if session.transcript and message.timestamp < session.transcript[-1].timestamp:
            message = replace(message, timestamp=session.transcript[-1].timestamp)
        session.transcript.append(message)
        return message

    async def _respond(self, prompt: str, language: str) -> str:
        try:
            raw = await self._generate(prompt)
        except GenerationError as ex:
            logger.error(f"Generation failed, replying with failure notice: {ex.message}")
            return i18n.t("chatbot.errorMessage", language)
        except Exception as ex:
            logger.error(f"Unexpected generation error, replying with failure notice: {type(ex).__name__}: {ex}")
            return i18n.t("chatbot.errorMessage", language)

        try:
            return await self._translator.translate(raw, language)
        except TranslationError as ex:
            logger.warning(f"Translation failed, keeping generated text: {ex.message}")
            return raw
        except Exception as ex:
            logger.error(f"Unexpected translation error, keeping generated text: {type(ex).__name__}: {ex}")
            return raw

    async def _generate(self, prompt: str) -> str:
        if self._generation_retries == 0:
            return await self._generator.generate(prompt)
        async for attempt in AsyncRetrying(
            **generation_retry_kwargs(self._generation_retries, wait_seconds=self._retry_wait_seconds)
        ):
            with attempt:
                return await self._generator.generate(prompt)
        raise GenerationError("generation retries exhausted")

    def _persist(self, session: Session, message: Message) -> None:
        task = asyncio.create_task(self._write(session.identity, message))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _write(self, identity: str | None, message: Message) -> None:
        try:
            await self._store.append(identity, message)
        except PersistenceError as ex:
            logger.warning(f"Skipped persisting {message.sender.value} message {message.id}: {ex.message}")
        except Exception as ex:
            logger.error(f"Unexpected error persisting message {message.id}: {type(ex).__name__}: {ex}")
