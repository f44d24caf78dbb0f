from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

from elevate_chat.models import ChatSession, Message, UserProfile


@runtime_checkable
class Subscription(Protocol):
    def cancel(self) -> None:
        """Stop delivery. Calling it more than once is a no-op."""
        ...


@runtime_checkable
class IdentityProvider(Protocol):
    def current_identity(self) -> str | None: ...

    def sign_out(self) -> None: ...


@runtime_checkable
class MessageStoreProtocol(Protocol):
    def append(self, chat_id: str, message: Message) -> str:
        """Persist ``message`` at the end of the chat's log; returns the message id."""
        ...

    def subscribe(
        self,
        chat_id: str,
        on_change: Callable[[Sequence[Message]], None],
    ) -> Subscription:
        """Deliver the full ordered message list now and after every change."""
        ...


@runtime_checkable
class SessionIndexProtocol(Protocol):
    def create_session(self, user_id: str, title: str, metadata: dict | None = None) -> ChatSession:
        """Register a session and its chat metadata as one unit."""
        ...

    def subscribe(
        self,
        user_id: str,
        on_change: Callable[[Sequence[ChatSession]], None],
    ) -> Subscription:
        """Deliver the user's sessions, newest first, now and after every change."""
        ...


@runtime_checkable
class ProfileStoreProtocol(Protocol):
    def get_profile(self, uid: str) -> UserProfile | None: ...
