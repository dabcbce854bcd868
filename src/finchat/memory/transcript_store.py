from __future__ import annotations

import sqlite3
from collections.abc import Callable
from datetime import datetime
from typing import Protocol, runtime_checkable

from loguru import logger

from finchat.errors import PersistenceError
from finchat.memory.models import MessageRecord, format_timestamp, to_record
from finchat.memory.store import MemoryStore
from finchat.models import GUEST_USER_ID, Message, is_guest, utc_now


def resolve_user_id(identity: str | None) -> str:
    return GUEST_USER_ID if is_guest(identity) else str(identity)


@runtime_checkable
class TranscriptStore(Protocol):
    async def append(self, identity: str | None, message: Message) -> None:
        """Durably append ``message`` to the identity's log. Raises PersistenceError."""
        ...

    async def load_history(self, identity: str | None) -> list[Message]:
        """All persisted messages for the identity, oldest first. Raises PersistenceError."""
        ...


class SqliteTranscriptStore:
    """Transcript log in the ``messages`` table.

    Queries run on the MemoryStore worker thread, so a slow disk suspends
    the calling task rather than the event loop.
    """

    def __init__(self, store: MemoryStore, *, clock: Callable[[], datetime] = utc_now):
        self._store = store
        self._clock = clock

    async def append(self, identity: str | None, message: Message) -> None:
        user_id = resolve_user_id(identity)
        try:
            record = await self._store.run(self._insert, user_id, message)
        except sqlite3.Error as ex:
            raise PersistenceError(f"Failed to append message {message.id}", original_error=ex) from ex
        logger.debug(f"Persisted {record['sender']} message {message.id} for {user_id}")

    async def load_history(self, identity: str | None) -> list[Message]:
        user_id = resolve_user_id(identity)
        try:
            rows = await self._store.run(self._select, user_id)
        except sqlite3.Error as ex:
            raise PersistenceError(f"Failed to load history for {user_id}", original_error=ex) from ex
        return [MessageRecord(**dict(row)).to_message() for row in rows]

    def _insert(self, user_id: str, message: Message) -> dict:
        # Stamped on the worker so timestamp order follows seq order.
        record = to_record(message, user_id, timestamp=self._clock())
        try:
            self._store.execute(
                """
                INSERT INTO messages (id, user_id, text, sender, timestamp, language)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    message.id,
                    record["userId"],
                    record["text"],
                    record["sender"],
                    record["timestamp"],
                    message.language,
                ),
            )
            self._store.commit()
        except sqlite3.Error:
            self._store.rollback()
            raise
        return record

    def _select(self, user_id: str) -> list[sqlite3.Row]:
        return self._store.execute(
            """
            SELECT seq, id, user_id, text, sender, timestamp, language
            FROM messages
            WHERE user_id = ?
            ORDER BY timestamp ASC, seq ASC
            """,
            (user_id,),
        ).fetchall()


class InMemoryTranscriptStore:
    """Process-local transcript log with the same ordering rules as the SQLite store."""

    def __init__(self, *, clock: Callable[[], datetime] = utc_now):
        self._clock = clock
        self._records: list[MessageRecord] = []

    async def append(self, identity: str | None, message: Message) -> None:
        self._records.append(
            MessageRecord(
                seq=len(self._records) + 1,
                id=message.id,
                user_id=resolve_user_id(identity),
                text=message.text,
                sender=message.sender.value,
                timestamp=format_timestamp(self._clock()),
                language=message.language,
            )
        )

    async def load_history(self, identity: str | None) -> list[Message]:
        user_id = resolve_user_id(identity)
        rows = [r for r in self._records if r.user_id == user_id]
        rows.sort(key=lambda r: (r.timestamp, r.seq))
        return [r.to_message() for r in rows]

    def records(self) -> list[dict]:
        return [
            {"userId": r.user_id, "text": r.text, "sender": r.sender, "timestamp": r.timestamp}
            for r in self._records
        ]
