from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from finchat.models import Message, Sender


@dataclass(frozen=True)
class MessageRecord:
    seq: int
    id: str
    user_id: str
    text: str
    sender: str
    timestamp: str
    language: str | None

    def to_message(self) -> Message:
        return Message(
            id=self.id,
            text=self.text,
            sender=Sender.parse(self.sender),
            timestamp=parse_timestamp(self.timestamp),
            language=self.language,
        )


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="milliseconds")


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def to_record(message: Message, user_id: str, *, timestamp: datetime | None = None) -> dict:
    """The persisted message document: ``{userId, text, sender, timestamp}``."""
    return {
        "userId": user_id,
        "text": message.text,
        "sender": message.sender.value,
        "timestamp": format_timestamp(timestamp or message.timestamp),
    }
