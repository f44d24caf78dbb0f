from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from uuid import uuid4

from loguru import logger

from elevate_chat.models import ChatSession, now_millis
from elevate_chat.store.store import ChatStore
from elevate_chat.store.subscriptions import ChangeNotifier, ListenerSubscription


class SessionIndex:
    def __init__(
        self,
        store: ChatStore,
        *,
        id_factory: Callable[[], str] | None = None,
    ):
        self._store = store
        self._id_factory = id_factory or (lambda: str(uuid4()))
        self._notifier: ChangeNotifier[list[ChatSession]] = ChangeNotifier()

    def create_session(self, user_id: str, title: str, metadata: dict | None = None) -> ChatSession:
        """Create a chat and register it in the user's history in one transaction.

        Either both the ``chats`` metadata row and the ``chat_sessions`` entry
        exist afterwards, or neither does.
        """
        chat_id = self._id_factory()
        created_at = now_millis()
        full_metadata = {"title": title, "createdAt": created_at}
        full_metadata.update(metadata or {})

        with self._store.transaction():
            self._store.execute(
                "INSERT INTO chats (id, title, created_at, metadata_json) VALUES (?, ?, ?, ?)",
                (chat_id, title, created_at, json.dumps(full_metadata, ensure_ascii=True)),
            )
            row = self._store.fetch_one(
                "SELECT COALESCE(MAX(position), 0) AS max_pos FROM chat_sessions WHERE user_id = ?",
                (user_id,),
            )
            self._store.execute(
                """
                INSERT INTO chat_sessions (id, user_id, title, created_at, position)
                VALUES (?, ?, ?, ?, ?)
                """,
                (chat_id, user_id, title, created_at, int(row["max_pos"]) + 1),
            )

        logger.info(f"Created chat session {chat_id} for user {user_id}")
        self._notify(user_id)
        return ChatSession(id=chat_id, title=title, created_at=created_at)

    def get_session(self, chat_id: str) -> ChatSession | None:
        row = self._store.fetch_one(
            "SELECT id, title, created_at FROM chat_sessions WHERE id = ? LIMIT 1",
            (chat_id,),
        )
        if row is None:
            return None
        return ChatSession(id=row["id"], title=row["title"], created_at=int(row["created_at"]))

    def get_metadata(self, chat_id: str) -> dict | None:
        row = self._store.fetch_one(
            "SELECT metadata_json FROM chats WHERE id = ? LIMIT 1",
            (chat_id,),
        )
        if row is None:
            return None
        return json.loads(row["metadata_json"])

    def list_sessions(self, user_id: str) -> list[ChatSession]:
        rows = self._store.fetch_all(
            """
            SELECT id, title, created_at
            FROM chat_sessions
            WHERE user_id = ?
            ORDER BY position DESC
            """,
            (user_id,),
        )
        return [ChatSession(id=row["id"], title=row["title"], created_at=int(row["created_at"])) for row in rows]

    def subscribe(
        self,
        user_id: str,
        on_change: Callable[[Sequence[ChatSession]], None],
    ) -> ListenerSubscription:
        subscription = self._notifier.add(user_id, on_change)
        on_change(self.list_sessions(user_id))
        return subscription

    def _notify(self, user_id: str) -> None:
        if self._notifier.has_listeners(user_id):
            self._notifier.notify(user_id, self.list_sessions(user_id))
