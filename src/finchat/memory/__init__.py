from finchat.memory.models import MessageRecord, to_record
from finchat.memory.pruning import prune_transcripts
from finchat.memory.store import MemoryStore
from finchat.memory.transcript_store import (
    InMemoryTranscriptStore,
    SqliteTranscriptStore,
    TranscriptStore,
)

__all__ = [
    "InMemoryTranscriptStore",
    "MemoryStore",
    "MessageRecord",
    "SqliteTranscriptStore",
    "TranscriptStore",
    "prune_transcripts",
    "to_record",
]
