from __future__ import annotations

from collections.abc import Awaitable, Callable


class CommandRouter:
    def __init__(
        self,
        *,
        on_help: Callable[[], Awaitable[None]],
        on_new: Callable[[], Awaitable[None]],
        on_chats: Callable[[], Awaitable[None]],
        on_open: Callable[[str], Awaitable[None]],
        on_whoami: Callable[[], Awaitable[None]],
        on_logout: Callable[[], Awaitable[None]],
        on_unknown: Callable[[str], None],
    ) -> None:
        self._on_help = on_help
        self._on_new = on_new
        self._on_chats = on_chats
        self._on_open = on_open
        self._on_whoami = on_whoami
        self._on_logout = on_logout
        self._on_unknown = on_unknown

    async def try_handle(self, user_message: str) -> bool:
        trimmed = user_message.strip()
        if not trimmed.startswith("/"):
            return False

        command, _, argument = trimmed.partition(" ")
        if command == "/help":
            await self._on_help()
            return True
        if command == "/new":
            await self._on_new()
            return True
        if command == "/chats":
            await self._on_chats()
            return True
        if command == "/open":
            await self._on_open(argument.strip())
            return True
        if command == "/whoami":
            await self._on_whoami()
            return True
        if command == "/logout":
            await self._on_logout()
            return True

        self._on_unknown(trimmed)
        return True
