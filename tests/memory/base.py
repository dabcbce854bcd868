import shutil
import unittest
from datetime import UTC, datetime, timedelta
from pathlib import Path
from uuid import uuid4

from finchat.memory import MemoryStore, SqliteTranscriptStore


PROJECT_ROOT = Path(__file__).resolve().parents[2]


class StepClock:
    """Deterministic clock: each call advances by one second."""

    def __init__(self, start: datetime | None = None):
        self._current = start or datetime(2024, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        value = self._current
        self._current = self._current + timedelta(seconds=1)
        return value


class TranscriptStoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp_dir = PROJECT_ROOT / ".test-artifacts" / f"{self.__class__.__name__.lower()}-{uuid4().hex}"
        self._tmp_dir.mkdir(parents=True, exist_ok=True)
        self._store = MemoryStore(str(self._tmp_dir / "transcripts.db"))
        self._clock = StepClock()
        self._transcripts = SqliteTranscriptStore(self._store, clock=self._clock)

    def tearDown(self) -> None:
        self._store.close()
        shutil.rmtree(self._tmp_dir, ignore_errors=True)
