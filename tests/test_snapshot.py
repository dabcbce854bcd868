import asyncio
import json
import shutil
import unittest
from pathlib import Path
from uuid import uuid4

from finchat.snapshot import JsonSnapshotProvider

PROJECT_ROOT = Path(__file__).resolve().parents[1]


class JsonSnapshotProviderTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp_dir = PROJECT_ROOT / ".test-artifacts" / f"snapshots-{uuid4().hex}"
        self._tmp_dir.mkdir(parents=True, exist_ok=True)
        self._path = self._tmp_dir / "snapshots.json"

    def tearDown(self) -> None:
        shutil.rmtree(self._tmp_dir, ignore_errors=True)

    def _write(self, payload: str) -> JsonSnapshotProvider:
        self._path.write_text(payload, encoding="utf-8")
        return JsonSnapshotProvider(self._path)

    def test_returns_user_document(self) -> None:
        provider = self._write(json.dumps({"u1": {"totalBalance": 900, "savingsGoal": 100}}))
        snapshot = asyncio.run(provider.get_snapshot("u1"))
        self.assertEqual(900, snapshot.total_balance)
        self.assertEqual(100, snapshot.savings_goal)

    def test_unknown_user_and_guest_have_no_snapshot(self) -> None:
        provider = self._write(json.dumps({"u1": {"totalBalance": 900}, "guest": {"totalBalance": 1}}))
        self.assertIsNone(asyncio.run(provider.get_snapshot("u2")))
        self.assertIsNone(asyncio.run(provider.get_snapshot(None)))

    def test_missing_or_invalid_file_has_no_snapshot(self) -> None:
        self.assertIsNone(asyncio.run(JsonSnapshotProvider(self._tmp_dir / "absent.json").get_snapshot("u1")))
        self.assertIsNone(asyncio.run(self._write("{not json").get_snapshot("u1")))
        self.assertIsNone(asyncio.run(self._write("[1, 2]").get_snapshot("u1")))


if __name__ == "__main__":
    unittest.main()
