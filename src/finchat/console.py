from __future__ import annotations

import asyncio
import sys
from collections.abc import Iterable
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

from finchat.models import Message, Sender

_SPINNER_FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"

USER_PREFIX = "you> "
ASSISTANT_PREFIX = "assistant> "


class Spinner:
    """Event-loop spinner that renders on the current line using \\r."""

    def __init__(self, prefix: str = "", label: str = " Thinking..."):
        self._prefix = prefix
        self._label = label
        self._task: asyncio.Task | None = None
        self._frame_width = 1 + len(label)

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        clear = self._prefix + " " * self._frame_width
        sys.stdout.write("\r" + clear + "\r")
        sys.stdout.flush()

    async def _run(self) -> None:
        i = 0
        try:
            while True:
                frame = _SPINNER_FRAMES[i % len(_SPINNER_FRAMES)] + self._label
                sys.stdout.write("\r" + self._prefix + frame)
                sys.stdout.flush()
                await asyncio.sleep(0.08)
                i += 1
        except (UnicodeEncodeError, OSError):
            pass  # terminal can't render the frames


@asynccontextmanager
async def thinking_spinner(*, prefix: str = ASSISTANT_PREFIX, label: str = " Thinking...") -> AsyncIterator[Spinner]:
    spinner = Spinner(prefix=prefix, label=label)
    spinner.start()
    try:
        yield spinner
    finally:
        await spinner.stop()


def format_time(timestamp: datetime) -> str:
    local = timestamp.astimezone()
    return local.strftime("%I:%M %p").lstrip("0")


def format_message_line(message: Message) -> str:
    prefix = USER_PREFIX if message.sender is Sender.USER else ASSISTANT_PREFIX
    return f"{prefix}{message.text}  [{format_time(message.timestamp)}]"


def format_transcript(messages: Iterable[Message]) -> list[str]:
    return [format_message_line(m) for m in messages]
