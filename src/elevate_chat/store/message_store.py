from __future__ import annotations

from collections.abc import Callable, Sequence
from uuid import uuid4

from elevate_chat.models import Message
from elevate_chat.store.store import ChatStore
from elevate_chat.store.subscriptions import ChangeNotifier, ListenerSubscription


class MessageStore:
    def __init__(self, store: ChatStore):
        self._store = store
        self._notifier: ChangeNotifier[list[Message]] = ChangeNotifier()

    def append(self, chat_id: str, message: Message) -> str:
        message_id = str(uuid4())
        with self._store.transaction():
            row = self._store.fetch_one(
                "SELECT COALESCE(MAX(seq), 0) AS max_seq FROM messages WHERE chat_id = ?",
                (chat_id,),
            )
            self._store.execute(
                """
                INSERT INTO messages (id, chat_id, seq, sender, text, timestamp)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (message_id, chat_id, int(row["max_seq"]) + 1, message.sender, message.text, message.timestamp),
            )

        if self._notifier.has_listeners(chat_id):
            self._notifier.notify(chat_id, self.load_messages(chat_id))
        return message_id

    def load_messages(self, chat_id: str) -> list[Message]:
        rows = self._store.fetch_all(
            """
            SELECT sender, text, timestamp
            FROM messages
            WHERE chat_id = ?
            ORDER BY seq ASC
            """,
            (chat_id,),
        )
        return [Message(text=row["text"], sender=row["sender"], timestamp=int(row["timestamp"])) for row in rows]

    def subscribe(
        self,
        chat_id: str,
        on_change: Callable[[Sequence[Message]], None],
    ) -> ListenerSubscription:
        subscription = self._notifier.add(chat_id, on_change)
        on_change(self.load_messages(chat_id))
        return subscription

    def subscriber_count(self, chat_id: str) -> int:
        return self._notifier.listener_count(chat_id)
