from __future__ import annotations

import asyncio
import sqlite3
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from pathlib import Path
from typing import Any, TypeVar

T = TypeVar("T")


class MemoryStore:
    """sqlite connection plus the single worker thread that async callers run queries on.

    One worker keeps queries in submission order and off the event loop.
    """

    def __init__(self, db_path: str):
        self._db_path = Path(db_path)
        if db_path != ":memory:":
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="finchat-sqlite")
        self._closed = False
        self._initialize_schema()

    def close(self) -> None:
        self._closed = True
        self._executor.shutdown(wait=True)
        self._conn.close()

    async def run(self, fn: Callable[..., T], *args: Any) -> T:
        if self._closed:
            raise sqlite3.ProgrammingError("Cannot operate on a closed database.")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, partial(fn, *args))

    def execute(self, query: str, params: tuple[Any, ...] = ()) -> sqlite3.Cursor:
        return self._conn.execute(query, params)

    def executemany(self, query: str, seq_of_params: list[tuple[Any, ...]]) -> sqlite3.Cursor:
        return self._conn.executemany(query, seq_of_params)

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def _initialize_schema(self) -> None:
        # seq and timestamp are assigned at write time by the store, not by clients.
        # 'bot' is the assistant sender used by records the web client wrote.
        self._conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS messages (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                user_id TEXT NOT NULL,
                text TEXT NOT NULL,
                sender TEXT NOT NULL CHECK (sender IN ('user', 'assistant', 'bot')),
                timestamp TEXT NOT NULL,
                language TEXT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_messages_user_timestamp
                ON messages(user_id, timestamp, seq);
            """
        )
        self._conn.commit()
