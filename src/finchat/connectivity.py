from __future__ import annotations

import asyncio
from enum import Enum
from typing import Protocol, runtime_checkable

import httpx
from loguru import logger

from finchat import i18n

OFFLINE_NOTICE_ID = "offline-toast"


class ConnectivityState(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


@runtime_checkable
class NoticeSink(Protocol):
    def show(self, notice_id: str, text: str, *, sticky: bool) -> None: ...
    def dismiss(self, notice_id: str) -> None: ...


class ConsoleNoticeSink:
    def __init__(self, *, line_prefix: str = ""):
        self._line_prefix = line_prefix
        self._visible: set[str] = set()

    def show(self, notice_id: str, text: str, *, sticky: bool) -> None:
        self._visible.add(notice_id)
        print(f"\n{self._line_prefix}[!] {text}", flush=True)

    def dismiss(self, notice_id: str) -> None:
        if notice_id in self._visible:
            self._visible.discard(notice_id)
            logger.info(f"Notice dismissed: {notice_id}")


class ConnectivityMonitor:
    """Tracks online/offline transitions and keeps exactly one offline notice visible while offline.

    Purely informational: nothing else is gated on this state.
    """

    def __init__(self, notices: NoticeSink, *, language: str = i18n.DEFAULT_LANGUAGE):
        self._notices = notices
        self._language = language
        self._state = ConnectivityState.ONLINE

    @property
    def state(self) -> ConnectivityState:
        return self._state

    @property
    def is_online(self) -> bool:
        return self._state is ConnectivityState.ONLINE

    @property
    def degraded(self) -> bool:
        return not self.is_online

    def set_language(self, language: str) -> None:
        self._language = language

    def set_offline(self) -> None:
        if self._state is ConnectivityState.OFFLINE:
            return
        self._state = ConnectivityState.OFFLINE
        logger.warning("Connectivity lost")
        self._notices.show(OFFLINE_NOTICE_ID, i18n.t("dashboard.offline", self._language), sticky=True)

    def set_online(self) -> None:
        if self._state is ConnectivityState.ONLINE:
            return
        self._state = ConnectivityState.ONLINE
        logger.info("Connectivity restored")
        self._notices.dismiss(OFFLINE_NOTICE_ID)

    def handle_event(self, event: str) -> None:
        name = event.strip().lower()
        if name == ConnectivityState.ONLINE.value:
            self.set_online()
        elif name == ConnectivityState.OFFLINE.value:
            self.set_offline()
        else:
            raise ValueError(f"Unknown connectivity event: {event!r}")


class ConnectivityProbe:
    """Periodically probes a URL and feeds the result into a ConnectivityMonitor."""

    def __init__(
        self,
        monitor: ConnectivityMonitor,
        url: str,
        *,
        interval_seconds: float = 15.0,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._monitor = monitor
        self._url = url
        self._interval_seconds = max(0.05, interval_seconds)
        self._timeout_seconds = timeout_seconds
        self._transport = transport
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def close(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def check_once(self) -> bool:
        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds, transport=self._transport) as client:
                await client.head(self._url)
            online = True
        except httpx.TransportError as ex:
            logger.debug(f"Connectivity probe failed: {type(ex).__name__}: {ex}")
            online = False

        if online:
            self._monitor.set_online()
        else:
            self._monitor.set_offline()
        return online

    async def _run(self) -> None:
        while True:
            await self.check_once()
            await asyncio.sleep(self._interval_seconds)
