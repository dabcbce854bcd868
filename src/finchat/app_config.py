from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from finchat.i18n import DEFAULT_LANGUAGE

_DEFAULT_MODELS = {
    "anthropic": "claude-sonnet-4-5-20250929",
    "openai": "gpt-4o-mini",
}


@dataclass
class RuntimeEnv:
    provider_api_key: str
    provider_env_var: str
    user_id: str | None


@dataclass
class AppConfig:
    provider_name: str
    model: str
    max_tokens: int
    temperature: float
    generation_timeout_seconds: float
    generation_retries: int
    default_language: str
    translation_enabled: bool
    translation_timeout_seconds: float
    persistence_enabled: bool
    transcript_db_path: str
    transcript_retention_days: int
    transcript_max_messages_per_user: int
    snapshots_path: str
    user_id: str | None
    connectivity_probe_url: str | None
    connectivity_probe_interval_seconds: float
    log_level: str
    log_consumers: list | None


def load_json_config(path: Path | None = None) -> dict:
    config_path = path or Path.cwd() / "config.json"
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            return json.load(f)
    return {}


def _to_bool(value: object, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    return bool(value)


def parse_app_config(config: dict) -> AppConfig:
    provider_name = str(config.get("Provider", "anthropic")).strip().lower()
    return AppConfig(
        provider_name=provider_name,
        model=config.get("Model", _DEFAULT_MODELS.get(provider_name, _DEFAULT_MODELS["anthropic"])),
        max_tokens=int(config.get("MaxTokens", 1024)),
        temperature=float(config.get("Temperature", 0.7)),
        generation_timeout_seconds=float(config.get("GenerationTimeoutSeconds", 60)),
        generation_retries=max(0, int(config.get("GenerationRetries", 0))),
        default_language=str(config.get("DefaultLanguage", DEFAULT_LANGUAGE)).strip() or DEFAULT_LANGUAGE,
        translation_enabled=_to_bool(config.get("TranslationEnabled", True), default=True),
        translation_timeout_seconds=float(config.get("TranslationTimeoutSeconds", 10)),
        persistence_enabled=_to_bool(config.get("PersistenceEnabled", True), default=True),
        transcript_db_path=str(config.get("TranscriptDbPath", ".finchat/transcripts.db")),
        transcript_retention_days=int(config.get("TranscriptRetentionDays", 0)),
        transcript_max_messages_per_user=int(config.get("TranscriptMaxMessagesPerUser", 0)),
        snapshots_path=str(config.get("SnapshotsPath", "snapshots.json")),
        user_id=str(config.get("UserId", "")).strip() or None,
        connectivity_probe_url=str(config.get("ConnectivityProbeUrl", "")).strip() or None,
        connectivity_probe_interval_seconds=float(config.get("ConnectivityProbeIntervalSeconds", 15)),
        log_level=config.get("LogLevel", "INFO"),
        log_consumers=config.get("LogConsumers"),
    )


def resolve_runtime_env(provider_name: str) -> RuntimeEnv:
    if provider_name == "openai":
        provider_env_var = "OPENAI_API_KEY"
    else:
        provider_env_var = "ANTHROPIC_API_KEY"

    return RuntimeEnv(
        provider_api_key=os.environ.get(provider_env_var, ""),
        provider_env_var=provider_env_var,
        user_id=os.environ.get("FINCHAT_USER_ID") or None,
    )
