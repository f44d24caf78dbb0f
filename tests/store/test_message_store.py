import sqlite3

from elevate_chat.errors import PersistenceError
from elevate_chat.models import Message
from tests.store.base import ChatStoreTestCase


class MessageStoreTests(ChatStoreTestCase):
    def test_append_and_load_keep_append_order(self) -> None:
        chat = self._sessions.create_session("u1", "chat")
        # Timestamps out of order: ordering follows appends, not timestamps
        self._messages.append(chat.id, Message(text="first", sender="user", timestamp=300))
        self._messages.append(chat.id, Message(text="second", sender="bot", timestamp=100))

        loaded = self._messages.load_messages(chat.id)
        self.assertEqual(["first", "second"], [m.text for m in loaded])
        self.assertEqual(["user", "bot"], [m.sender for m in loaded])

    def test_streaming_flag_is_never_persisted(self) -> None:
        chat = self._sessions.create_session("u1", "chat")
        self._messages.append(chat.id, Message(text="partial", sender="bot", is_streaming=True))

        loaded = self._messages.load_messages(chat.id)
        self.assertFalse(loaded[0].is_streaming)

    def test_append_to_unknown_chat_fails(self) -> None:
        with self.assertRaises(PersistenceError):
            self._messages.append("missing-chat", Message.user("hello"))

    def test_subscribe_delivers_full_list_on_each_change(self) -> None:
        chat = self._sessions.create_session("u1", "chat")
        self._messages.append(chat.id, Message.user("one"))
        deliveries: list[list[str]] = []

        subscription = self._messages.subscribe(chat.id, lambda msgs: deliveries.append([m.text for m in msgs]))
        self._messages.append(chat.id, Message.bot("two"))

        self.assertEqual([["one"], ["one", "two"]], deliveries)
        self.assertEqual(1, self._messages.subscriber_count(chat.id))

        subscription.cancel()
        subscription.cancel()
        self.assertEqual(0, self._messages.subscriber_count(chat.id))

    def test_subscribers_only_see_their_chat(self) -> None:
        chat_a = self._sessions.create_session("u1", "a")
        chat_b = self._sessions.create_session("u1", "b")
        deliveries: list[int] = []
        self._messages.subscribe(chat_a.id, lambda msgs: deliveries.append(len(msgs)))

        self._messages.append(chat_b.id, Message.user("elsewhere"))

        self.assertEqual([0], deliveries)

    def test_reload_failure_after_append_is_a_persistence_error(self) -> None:
        chat = self._sessions.create_session("u1", "chat")
        self._messages.subscribe(chat.id, lambda msgs: None)
        self._store._conn = _FailingReads(self._store._conn, "ORDER BY seq")

        with self.assertRaises(PersistenceError):
            self._messages.append(chat.id, Message.user("saved"))

        self._store._conn = self._store._conn.inner
        self.assertEqual(["saved"], [m.text for m in self._messages.load_messages(chat.id)])


class _FailingReads:
    """Connection wrapper that fails queries containing ``marker``."""

    def __init__(self, inner: sqlite3.Connection, marker: str) -> None:
        self.inner = inner
        self._marker = marker

    def execute(self, query: str, params=()):
        if self._marker in query:
            raise sqlite3.OperationalError("disk I/O error")
        return self.inner.execute(query, params)

    def __getattr__(self, name: str):
        return getattr(self.inner, name)
