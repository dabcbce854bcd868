from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol, runtime_checkable

from loguru import logger

from finchat.models import FinancialSnapshot, is_guest


@runtime_checkable
class SnapshotProvider(Protocol):
    async def get_snapshot(self, identity: str | None) -> FinancialSnapshot | None: ...


class JsonSnapshotProvider:
    """Read-only snapshot documents stored as ``{user_id: {totalBalance, accounts, ...}}``."""

    def __init__(self, path: str | Path):
        self._path = Path(path)

    async def get_snapshot(self, identity: str | None) -> FinancialSnapshot | None:
        if is_guest(identity) or not self._path.exists():
            return None
        try:
            with open(self._path, encoding="utf-8") as f:
                documents = json.load(f)
        except (OSError, ValueError) as ex:
            logger.warning(f"Failed to read snapshots from {self._path}: {ex}")
            return None
        if not isinstance(documents, dict):
            logger.warning(f"Snapshot file {self._path} is not a JSON object")
            return None
        document = documents.get(str(identity))
        if document is None:
            return None
        return FinancialSnapshot.from_document(document)
