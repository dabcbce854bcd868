from __future__ import annotations

from datetime import UTC, datetime, timedelta

from loguru import logger

from finchat.memory.models import format_timestamp
from finchat.memory.store import MemoryStore


def prune_transcripts(
    store: MemoryStore,
    *,
    max_messages_per_user: int,
    retention_days: int,
) -> int:
    """Delete expired and overflow messages. Returns the number of rows removed."""
    removed = 0

    if retention_days > 0:
        cutoff = format_timestamp(datetime.now(UTC) - timedelta(days=retention_days))
        cursor = store.execute("DELETE FROM messages WHERE timestamp < ?", (cutoff,))
        removed += max(0, cursor.rowcount)

    if max_messages_per_user > 0:
        users = store.execute("SELECT DISTINCT user_id FROM messages").fetchall()
        for user_row in users:
            user_id = str(user_row["user_id"])
            overflow = store.execute(
                """
                SELECT seq
                FROM messages
                WHERE user_id = ?
                ORDER BY timestamp DESC, seq DESC
                LIMIT -1 OFFSET ?
                """,
                (user_id, max_messages_per_user),
            ).fetchall()
            if overflow:
                store.executemany(
                    "DELETE FROM messages WHERE seq = ?",
                    [(int(row["seq"]),) for row in overflow],
                )
                removed += len(overflow)

    store.commit()
    if removed:
        logger.info(f"Pruned {removed} transcript message(s)")
    return removed
