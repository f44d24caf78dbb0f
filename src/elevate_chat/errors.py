from __future__ import annotations


class ChatError(Exception):
    """Base class for failures reported by the chat core."""

    kind = "error"


class ValidationError(ChatError):
    kind = "validation"


class PersistenceError(ChatError):
    kind = "persistence"


class StreamError(ChatError):
    kind = "stream"


class ConcurrentSendError(ChatError):
    kind = "concurrent_send"
