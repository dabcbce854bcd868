from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, TextIO

from loguru import logger

from finchat.models import GUEST_USER_ID

DEFAULT_LOG_FILE = "finchat.log"

# Erase whatever the spinner or the "you> " prompt left on the current line.
_CLEAR_LINE = "\r\x1b[K"

_CONSOLE_FORMAT = "<level>{level:<8}</level> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | user={extra[user_id]} | {name}:{function}:{line} - {message}"

# The REPL owns the terminal, so only WARNING and above reach it by default.
_DEFAULT_CONSUMERS: list[dict[str, Any]] = [
    {"type": "console", "level": "WARNING"},
    {"type": "file", "path": DEFAULT_LOG_FILE},
]


class ReplConsoleSink:
    """stderr sink that starts every record on a clean line when attached to a terminal."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stderr

    @property
    def interactive(self) -> bool:
        isatty = getattr(self.stream, "isatty", None)
        return bool(isatty and isatty())

    def write(self, message: str) -> None:
        stream = self.stream
        if self.interactive:
            stream.write(_CLEAR_LINE)
        stream.write(message)
        stream.flush()


def _add_console(level: str, *, stream: TextIO | None = None) -> str:
    sink = ReplConsoleSink(stream)
    logger.add(sink.write, level=level, format=_CONSOLE_FORMAT, colorize=sink.interactive)
    return f"console (stderr, {level})"


def _add_file(
    level: str,
    *,
    path: str = DEFAULT_LOG_FILE,
    rotation: str = "10 MB",
    retention: int = 3,
) -> str:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        path,
        level=level,
        format=_FILE_FORMAT,
        rotation=rotation,
        retention=retention,
        encoding="utf-8",
    )
    return f"file ({path}, {level})"


_SINK_BUILDERS = {
    "console": _add_console,
    "file": _add_file,
}


def setup_logging(
    level: str = "INFO",
    consumers: list[dict[str, Any]] | None = None,
    *,
    user_id: str | None = None,
) -> list[str]:
    """Replace loguru's sinks with the configured consumers.

    Every record carries ``user_id`` (``guest`` when unset) so the log file
    can be split per session owner. Returns a description of each sink added.
    """
    logger.remove()
    logger.configure(extra={"user_id": user_id or GUEST_USER_ID})

    descriptions: list[str] = []
    skipped: list[str] = []
    for config in consumers if consumers is not None else _DEFAULT_CONSUMERS:
        sink_type = config.get("type", "")
        build = _SINK_BUILDERS.get(sink_type)
        if build is None:
            skipped.append(repr(sink_type))
            continue
        options = {k: v for k, v in config.items() if k not in ("type", "level")}
        descriptions.append(build(config.get("level", level), **options))

    if skipped:
        logger.warning(f"Unknown log consumer type(s) ignored: {', '.join(skipped)}")
    return descriptions
