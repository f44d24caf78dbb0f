from __future__ import annotations

import sys
import threading
from typing import TextIO

from elevate_chat.commands.router import CommandRouter
from elevate_chat.controller import ChatSessionController
from elevate_chat.models import SENDER_USER, ChatSession, Message, Notice, ViewState

_MAX_DOTS = 3


class WaitingIndicator:
    """Animated dots shown after the reply prefix until the first fragment arrives."""

    def __init__(self, stream: TextIO | None = None, *, interval: float = 0.3):
        self._stream = stream or sys.stdout
        self._interval = interval
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._animate, daemon=True)
        self._width = 0

    def show(self) -> None:
        self._thread.start()

    def hide(self) -> None:
        if self._stopped.is_set():
            return
        self._stopped.set()
        if self._thread.is_alive():
            self._thread.join()
        self._erase()

    def _animate(self) -> None:
        dots = 0
        try:
            while not self._stopped.wait(self._interval):
                self._erase()
                dots = dots % _MAX_DOTS + 1
                self._stream.write("." * dots)
                self._stream.flush()
                self._width = dots
        except OSError:
            pass  # closed terminal

    def _erase(self) -> None:
        if self._width:
            self._stream.write("\b" * self._width + " " * self._width + "\b" * self._width)
            self._stream.flush()
            self._width = 0


def short_id(value: str, length: int = 8) -> str:
    return value if len(value) <= length else value[:length]


def format_session_entry(session: ChatSession, *, active_chat_id: str | None, line_prefix: str = "") -> str:
    marker = "*" if session.id == active_chat_id else " "
    return f"{line_prefix}{marker} {session.title} [{short_id(session.id)}]"


def format_message(message: Message, *, line_prefix: str = "") -> str:
    speaker = "you> " if message.sender == SENDER_USER else line_prefix
    return f"{speaker}{message.text}"


class ConsoleView:
    """Renders controller updates to stdout.

    Streamed reply text is printed incrementally: each update prints only the
    characters beyond what has already been written for the current reply.
    """

    def __init__(self, *, line_prefix: str = "elevate> ", show_waiting: bool = True):
        self._line_prefix = line_prefix
        self._show_waiting = show_waiting
        self._indicator: WaitingIndicator | None = None
        self._printed = 0
        self._streaming = False

    def on_state(self, state: ViewState) -> None:
        last = state.messages[-1] if state.messages else None
        if last is not None and last.is_streaming:
            if not self._streaming:
                self._streaming = True
                self._printed = 0
                sys.stdout.write(self._line_prefix)
                sys.stdout.flush()
                if self._show_waiting:
                    self._indicator = WaitingIndicator()
                    self._indicator.show()
            if len(last.text) > self._printed:
                self._hide_indicator()
                sys.stdout.write(last.text[self._printed:])
                sys.stdout.flush()
                self._printed = len(last.text)
            return

        if self._streaming:
            self._hide_indicator()
            self._streaming = False
            self._printed = 0
            sys.stdout.write("\n")
            sys.stdout.flush()

    def on_notice(self, notice: Notice) -> None:
        self._hide_indicator()
        if self._streaming:
            sys.stdout.write("\n")
            self._streaming = False
            self._printed = 0
        print(f"{self._line_prefix}[{notice.kind}] {notice.message}")

    def _hide_indicator(self) -> None:
        if self._indicator is not None:
            self._indicator.hide()
            self._indicator = None


class ChatConsole:
    _LINE_PREFIX = "elevate> "

    def __init__(self, controller: ChatSessionController, *, show_waiting: bool = True):
        self._controller = controller
        self._view = ConsoleView(line_prefix=self._LINE_PREFIX, show_waiting=show_waiting)
        self._subscriptions = [
            controller.add_listener(self._view.on_state),
            controller.add_notice_listener(self._view.on_notice),
        ]
        self._command_router = CommandRouter(
            on_help=self._print_help,
            on_new=self._handle_new,
            on_chats=self._handle_chats,
            on_open=self._handle_open,
            on_whoami=self._handle_whoami,
            on_logout=self._handle_logout,
            on_unknown=self._on_unknown_command,
        )

    async def handle(self, user_input: str) -> None:
        if await self._command_router.try_handle(user_input):
            return
        task = self._controller.send_prompt(user_input)
        if task is not None:
            await task

    def close(self) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []

    async def _print_help(self) -> None:
        print(f"{self._LINE_PREFIX}Commands:")
        print(f"{self._LINE_PREFIX}  /new            start a new chat (next message creates it)")
        print(f"{self._LINE_PREFIX}  /chats          list your chats, newest first")
        print(f"{self._LINE_PREFIX}  /open <id|name> switch to a chat")
        print(f"{self._LINE_PREFIX}  /whoami         show the signed-in profile")
        print(f"{self._LINE_PREFIX}  /logout         sign out")
        print(f"{self._LINE_PREFIX}  exit            quit")

    async def _handle_new(self) -> None:
        self._controller.create_new_chat()
        print(f"{self._LINE_PREFIX}New chat. Send a message to start it.")

    async def _handle_chats(self) -> None:
        sessions = self._controller.sessions
        if not sessions:
            print(f"{self._LINE_PREFIX}No chats yet.")
            return
        for session in sessions:
            print(
                format_session_entry(
                    session,
                    active_chat_id=self._controller.active_chat_id,
                    line_prefix=self._LINE_PREFIX,
                )
            )

    async def _handle_open(self, identifier: str) -> None:
        if not identifier:
            print(f"{self._LINE_PREFIX}Usage: /open <id|name>")
            return
        session = self._find_session(identifier)
        if session is None:
            print(f"{self._LINE_PREFIX}No chat matches {identifier!r}")
            return
        self._controller.select_chat(session.id)
        print(f"{self._LINE_PREFIX}Opened: {session.title} [{short_id(session.id)}]")
        for message in self._controller.merged_view():
            print(format_message(message, line_prefix=self._LINE_PREFIX))

    async def _handle_whoami(self) -> None:
        profile = self._controller.user_profile()
        if profile is None:
            print(f"{self._LINE_PREFIX}Not signed in.")
            return
        name = profile.name or profile.uid
        email = f" <{profile.email}>" if profile.email else ""
        print(f"{self._LINE_PREFIX}{name}{email}")

    async def _handle_logout(self) -> None:
        self._controller.sign_out()

    def _on_unknown_command(self, command: str) -> None:
        print(f"{self._LINE_PREFIX}Unknown command: {command}. Type /help for commands.")

    def _find_session(self, identifier: str) -> ChatSession | None:
        sessions = self._controller.sessions
        for session in sessions:
            if session.id == identifier:
                return session
        prefixed = [s for s in sessions if s.id.startswith(identifier)]
        if len(prefixed) == 1:
            return prefixed[0]
        lowered = identifier.lower()
        titled = [s for s in sessions if s.title.lower().startswith(lowered)]
        if len(titled) == 1:
            return titled[0]
        return None
