import asyncio
import sqlite3
import threading
import unittest
from datetime import UTC, datetime, timedelta

from finchat.errors import PersistenceError
from finchat.memory import InMemoryTranscriptStore, to_record
from finchat.models import Message, Sender
from tests.memory.base import StepClock, TranscriptStoreTestCase


class SqliteTranscriptStoreTests(TranscriptStoreTestCase):
    def test_append_and_load_history_in_order(self) -> None:
        async def scenario() -> list[Message]:
            await self._transcripts.append("u1", Message(text="m1", sender=Sender.USER))
            await self._transcripts.append("u1", Message(text="m2", sender=Sender.ASSISTANT))
            await self._transcripts.append("u1", Message(text="m3", sender=Sender.USER))
            return await self._transcripts.load_history("u1")

        history = asyncio.run(scenario())
        self.assertEqual(["m1", "m2", "m3"], [m.text for m in history])
        self.assertEqual([Sender.USER, Sender.ASSISTANT, Sender.USER], [m.sender for m in history])

    def test_history_is_scoped_to_user(self) -> None:
        async def scenario() -> tuple[list[Message], list[Message]]:
            await self._transcripts.append("u1", Message(text="mine", sender=Sender.USER))
            await self._transcripts.append("u2", Message(text="theirs", sender=Sender.USER))
            return await self._transcripts.load_history("u1"), await self._transcripts.load_history("u2")

        mine, theirs = asyncio.run(scenario())
        self.assertEqual(["mine"], [m.text for m in mine])
        self.assertEqual(["theirs"], [m.text for m in theirs])

    def test_store_assigns_timestamp_at_write_time(self) -> None:
        skewed = datetime(2030, 6, 1, tzinfo=UTC)

        async def scenario() -> list[Message]:
            await self._transcripts.append("u1", Message(text="late clock", sender=Sender.USER, timestamp=skewed))
            await self._transcripts.append("u1", Message(text="second", sender=Sender.ASSISTANT))
            return await self._transcripts.load_history("u1")

        history = asyncio.run(scenario())
        self.assertEqual(["late clock", "second"], [m.text for m in history])
        self.assertEqual(datetime(2024, 1, 1, tzinfo=UTC), history[0].timestamp)
        self.assertLess(history[0].timestamp, history[1].timestamp)

    def test_equal_timestamps_fall_back_to_insertion_order(self) -> None:
        fixed = datetime(2024, 1, 1, tzinfo=UTC)
        self._transcripts._clock = lambda: fixed

        async def scenario() -> list[Message]:
            for text in ("a", "b", "c"):
                await self._transcripts.append("u1", Message(text=text, sender=Sender.USER))
            return await self._transcripts.load_history("u1")

        self.assertEqual(["a", "b", "c"], [m.text for m in asyncio.run(scenario())])

    def test_guest_writes_use_guest_user_id(self) -> None:
        asyncio.run(self._transcripts.append(None, Message(text="hello", sender=Sender.USER)))
        row = self._store.execute("SELECT user_id, sender FROM messages").fetchone()
        self.assertEqual("guest", row["user_id"])
        self.assertEqual("user", row["sender"])

    def test_web_client_bot_rows_load_as_assistant_messages(self) -> None:
        self._store.executemany(
            """
            INSERT INTO messages (id, user_id, text, sender, timestamp, language)
            VALUES (?, 'u1', ?, ?, ?, NULL)
            """,
            [
                ("w1", "How much did I spend?", "user", "2024-01-01T00:00:00Z"),
                ("w2", "About 50.", "bot", "2024-01-01T00:00:02.000Z"),
            ],
        )
        self._store.commit()

        history = asyncio.run(self._transcripts.load_history("u1"))

        self.assertEqual(["w1", "w2"], [m.id for m in history])
        self.assertEqual([Sender.USER, Sender.ASSISTANT], [m.sender for m in history])
        self.assertEqual(datetime(2024, 1, 1, 0, 0, 2, tzinfo=UTC), history[1].timestamp)

    def test_unknown_sender_is_rejected_by_schema(self) -> None:
        with self.assertRaises(sqlite3.IntegrityError):
            self._store.execute(
                """
                INSERT INTO messages (id, user_id, text, sender, timestamp, language)
                VALUES ('x', 'u1', 'hi', 'system', '2024-01-01T00:00:00.000+00:00', NULL)
                """
            )

    def test_queries_run_off_the_event_loop_thread(self) -> None:
        clock_threads: list[int] = []
        step = StepClock()

        def clock() -> datetime:
            clock_threads.append(threading.get_ident())
            return step()

        self._transcripts._clock = clock

        async def scenario() -> int:
            await self._transcripts.append("u1", Message(text="m1", sender=Sender.USER))
            return threading.get_ident()

        loop_thread = asyncio.run(scenario())
        self.assertEqual(1, len(clock_threads))
        self.assertNotEqual(loop_thread, clock_threads[0])

    def test_concurrent_appends_keep_submission_order(self) -> None:
        async def scenario() -> list[Message]:
            await asyncio.gather(
                *(self._transcripts.append("u1", Message(text=f"m{i}", sender=Sender.USER)) for i in range(6))
            )
            return await self._transcripts.load_history("u1")

        self.assertEqual([f"m{i}" for i in range(6)], [m.text for m in asyncio.run(scenario())])

    def test_duplicate_message_id_raises_persistence_error(self) -> None:
        message = Message(text="once", sender=Sender.USER)
        asyncio.run(self._transcripts.append("u1", message))
        with self.assertRaises(PersistenceError) as ctx:
            asyncio.run(self._transcripts.append("u1", message))
        self.assertIsInstance(ctx.exception.original_error, sqlite3.Error)

    def test_load_after_close_raises_persistence_error(self) -> None:
        self._store.close()
        with self.assertRaises(PersistenceError):
            asyncio.run(self._transcripts.load_history("u1"))
        # tearDown closes again; sqlite tolerates a second close.


class InMemoryTranscriptStoreTests(unittest.TestCase):
    def test_orders_by_store_timestamp_and_scopes_by_user(self) -> None:
        store = InMemoryTranscriptStore(clock=StepClock())

        async def scenario() -> list[Message]:
            await store.append("u1", Message(text="first", sender=Sender.USER))
            await store.append("u2", Message(text="other", sender=Sender.USER))
            await store.append("u1", Message(text="second", sender=Sender.ASSISTANT))
            return await store.load_history("u1")

        self.assertEqual(["first", "second"], [m.text for m in asyncio.run(scenario())])
        self.assertEqual(
            {"userId": "u2", "text": "other", "sender": "user", "timestamp": "2024-01-01T00:00:01.000+00:00"},
            store.records()[1],
        )


class PersistedRecordTests(unittest.TestCase):
    def test_to_record_shape(self) -> None:
        message = Message(
            text="How am I doing?",
            sender=Sender.USER,
            timestamp=datetime(2024, 1, 1, 12, 30, tzinfo=UTC) + timedelta(milliseconds=5),
        )
        self.assertEqual(
            {
                "userId": "u1",
                "text": "How am I doing?",
                "sender": "user",
                "timestamp": "2024-01-01T12:30:00.005+00:00",
            },
            to_record(message, "u1"),
        )


if __name__ == "__main__":
    unittest.main()
