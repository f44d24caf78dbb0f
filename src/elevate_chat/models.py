from __future__ import annotations

import time
from dataclasses import dataclass

SENDER_USER = "user"
SENDER_BOT = "bot"

_SENDERS = frozenset({SENDER_USER, SENDER_BOT})


def now_millis() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class ChatSession:
    """An entry in a user's chat history list."""

    id: str
    title: str
    created_at: int = 0


@dataclass(frozen=True)
class Message:
    """A single chat message.

    ``is_streaming`` only ever holds ``True`` on the in-memory placeholder for a
    response that is still being generated; it is never written to a store.
    """

    text: str
    sender: str = SENDER_USER
    timestamp: int = 0
    is_streaming: bool = False

    def __post_init__(self) -> None:
        if self.sender not in _SENDERS:
            raise ValueError(f"Unknown sender: {self.sender!r}")

    @classmethod
    def user(cls, text: str) -> Message:
        return cls(text=text, sender=SENDER_USER, timestamp=now_millis())

    @classmethod
    def bot(cls, text: str) -> Message:
        return cls(text=text, sender=SENDER_BOT, timestamp=now_millis())

    @classmethod
    def placeholder(cls) -> Message:
        return cls(text="", sender=SENDER_BOT, timestamp=now_millis(), is_streaming=True)


@dataclass(frozen=True)
class UserProfile:
    uid: str
    name: str = ""
    email: str = ""
    profile_image_url: str = ""


@dataclass(frozen=True)
class StreamingMessage:
    chat_id: str
    message: Message


@dataclass(frozen=True)
class Notice:
    kind: str
    message: str


@dataclass(frozen=True)
class ViewState:
    active_chat_id: str | None
    messages: tuple[Message, ...]
    sessions: tuple[ChatSession, ...]
    is_streaming: bool

    @property
    def is_welcome(self) -> bool:
        return self.active_chat_id is None
