from __future__ import annotations

from collections.abc import Awaitable, Callable


class CommandRouter:
    def __init__(
        self,
        *,
        on_help: Callable[[], Awaitable[None]],
        on_lang: Callable[[str], Awaitable[None]],
        on_history: Callable[[], Awaitable[None]],
        on_status: Callable[[], Awaitable[None]],
        on_connectivity: Callable[[str], Awaitable[None]],
        on_unknown: Callable[[str], None],
    ) -> None:
        self._on_help = on_help
        self._on_lang = on_lang
        self._on_history = on_history
        self._on_status = on_status
        self._on_connectivity = on_connectivity
        self._on_unknown = on_unknown

    async def try_handle(self, user_message: str) -> bool:
        trimmed = user_message.strip()
        if not trimmed.startswith("/"):
            return False

        if trimmed == "/help":
            await self._on_help()
            return True
        if trimmed == "/lang" or trimmed.startswith("/lang "):
            await self._on_lang(trimmed[len("/lang"):].strip())
            return True
        if trimmed == "/history":
            await self._on_history()
            return True
        if trimmed == "/status":
            await self._on_status()
            return True
        if trimmed in ("/online", "/offline"):
            await self._on_connectivity(trimmed[1:])
            return True

        self._on_unknown(trimmed)
        return True
