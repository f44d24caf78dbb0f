from elevate_chat.store.message_store import MessageStore
from elevate_chat.store.profiles import ProfileStore
from elevate_chat.store.session_index import SessionIndex
from elevate_chat.store.store import ChatStore

__all__ = [
    "ChatStore",
    "MessageStore",
    "ProfileStore",
    "SessionIndex",
]
