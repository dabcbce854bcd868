from __future__ import annotations

from loguru import logger

from finchat import i18n
from finchat.commands.router import CommandRouter
from finchat.connectivity import ConnectivityMonitor
from finchat.console import ASSISTANT_PREFIX, format_message_line, format_transcript, thinking_spinner
from finchat.models import FinancialSnapshot
from finchat.services.session_controller import SessionController


class ChatShell:
    """Terminal front end: routes slash commands locally and everything else to the controller."""

    def __init__(
        self,
        controller: SessionController,
        monitor: ConnectivityMonitor,
        *,
        snapshot: FinancialSnapshot | None = None,
        show_spinner: bool = True,
    ):
        self._controller = controller
        self._monitor = monitor
        self._snapshot = snapshot
        self._show_spinner = show_spinner
        self._router = CommandRouter(
            on_help=self._on_help,
            on_lang=self._on_lang,
            on_history=self._on_history,
            on_status=self._on_status,
            on_connectivity=self._on_connectivity,
            on_unknown=self._on_unknown,
        )

    def set_snapshot(self, snapshot: FinancialSnapshot | None) -> None:
        self._snapshot = snapshot

    async def handle(self, user_input: str) -> None:
        if await self._router.try_handle(user_input):
            return

        if self._show_spinner:
            label = " " + i18n.t("chatbot.status.thinking", self._controller.language)
            async with thinking_spinner(label=label):
                appended = await self._controller.send_user_message(user_input, self._snapshot)
        else:
            appended = await self._controller.send_user_message(user_input, self._snapshot)

        for message in appended[1:]:
            print(format_message_line(message))

    def print_transcript(self) -> None:
        for line in format_transcript(self._controller.transcript):
            print(line)

    async def _on_help(self) -> None:
        print(f"{ASSISTANT_PREFIX}{i18n.t('cli.help', self._controller.language)}")

    async def _on_lang(self, code: str) -> None:
        if not code:
            print(f"{ASSISTANT_PREFIX}{i18n.t('cli.language_usage', self._controller.language)}")
            return
        self._controller.set_language(code)
        logger.info(f"Language preference changed to {code}")
        print(f"{ASSISTANT_PREFIX}{i18n.t('cli.language_set', code, language=code)}")

    async def _on_history(self) -> None:
        self.print_transcript()

    async def _on_status(self) -> None:
        language = self._controller.language
        status_key = "chatbot.status.online" if self._controller.is_online else "dashboard.offline"
        print(
            ASSISTANT_PREFIX
            + i18n.t(
                "cli.status",
                language,
                status=i18n.t(status_key, language),
                language=language,
                count=len(self._controller.transcript),
            )
        )

    async def _on_connectivity(self, event: str) -> None:
        self._monitor.handle_event(event)

    def _on_unknown(self, command: str) -> None:
        print(f"{ASSISTANT_PREFIX}{i18n.t('cli.unknown_command', self._controller.language, command=command)}")
