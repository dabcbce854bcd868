from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from finchat.app_config import AppConfig, RuntimeEnv
from finchat.connectivity import ConnectivityMonitor, ConnectivityProbe, ConsoleNoticeSink, NoticeSink
from finchat.console import ASSISTANT_PREFIX
from finchat.generation import GenerationClient, create_generation_client
from finchat.logging_config import setup_logging
from finchat.memory import InMemoryTranscriptStore, MemoryStore, SqliteTranscriptStore, prune_transcripts
from finchat.memory.transcript_store import TranscriptStore
from finchat.services.session_controller import SessionController
from finchat.snapshot import JsonSnapshotProvider
from finchat.translation import HttpTranslationClient, PassthroughTranslator, TranslationClient


@dataclass
class AppRuntime:
    controller: SessionController
    monitor: ConnectivityMonitor
    snapshots: JsonSnapshotProvider
    memory_store: MemoryStore | None
    probe: ConnectivityProbe | None
    user_id: str | None
    log_descriptions: list[str]

    async def close(self) -> None:
        if self.probe is not None:
            await self.probe.close()
        await self.controller.flush()
        if self.memory_store is not None:
            self.memory_store.close()


def _resolve_db_path(raw: str) -> Path:
    db_path = Path(raw)
    if not db_path.is_absolute():
        db_path = Path.cwd() / db_path
    return db_path


async def bootstrap_runtime(
    app: AppConfig,
    env: RuntimeEnv,
    *,
    generator: GenerationClient | None = None,
    notices: NoticeSink | None = None,
    configure_logging: bool = True,
) -> AppRuntime:
    user_id = env.user_id or app.user_id
    log_descriptions: list[str] = []
    if configure_logging:
        log_descriptions = setup_logging(level=app.log_level, consumers=app.log_consumers, user_id=user_id)

    if generator is None:
        generator = create_generation_client(
            app.provider_name,
            env.provider_api_key,
            model=app.model,
            max_tokens=app.max_tokens,
            temperature=app.temperature,
            timeout_seconds=app.generation_timeout_seconds,
        )

    translator: TranslationClient
    if app.translation_enabled:
        translator = HttpTranslationClient(timeout_seconds=app.translation_timeout_seconds)
    else:
        translator = PassthroughTranslator()

    memory_store: MemoryStore | None = None
    store: TranscriptStore
    if app.persistence_enabled:
        memory_store = MemoryStore(str(_resolve_db_path(app.transcript_db_path)))
        prune_transcripts(
            memory_store,
            max_messages_per_user=app.transcript_max_messages_per_user,
            retention_days=app.transcript_retention_days,
        )
        store = SqliteTranscriptStore(memory_store)
    else:
        logger.info("Persistence disabled; transcripts are kept in memory only")
        store = InMemoryTranscriptStore()

    monitor = ConnectivityMonitor(
        notices or ConsoleNoticeSink(line_prefix=ASSISTANT_PREFIX),
        language=app.default_language,
    )
    probe: ConnectivityProbe | None = None
    if app.connectivity_probe_url:
        probe = ConnectivityProbe(
            monitor,
            app.connectivity_probe_url,
            interval_seconds=app.connectivity_probe_interval_seconds,
        )
        await probe.start()

    controller = SessionController(
        store=store,
        generator=generator,
        translator=translator,
        monitor=monitor,
        default_language=app.default_language,
        generation_retries=app.generation_retries,
    )

    return AppRuntime(
        controller=controller,
        monitor=monitor,
        snapshots=JsonSnapshotProvider(app.snapshots_path),
        memory_store=memory_store,
        probe=probe,
        user_id=user_id,
        log_descriptions=log_descriptions,
    )
