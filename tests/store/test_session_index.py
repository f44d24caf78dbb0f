from elevate_chat.errors import PersistenceError
from tests.store.base import ChatStoreTestCase


class SessionIndexTests(ChatStoreTestCase):
    def test_create_session_writes_history_entry_and_chat_metadata(self) -> None:
        session = self._sessions.create_session("u1", "Hi - Oct 19, 2026")

        self.assertTrue(session.id)
        self.assertEqual("Hi - Oct 19, 2026", session.title)
        self.assertEqual(session, self._sessions.get_session(session.id))
        metadata = self._sessions.get_metadata(session.id)
        self.assertIsNotNone(metadata)
        self.assertEqual("Hi - Oct 19, 2026", metadata["title"])
        self.assertEqual(session.created_at, metadata["createdAt"])

    def test_create_session_is_all_or_nothing(self) -> None:
        self._store.execute(
            """
            CREATE TRIGGER reject_history BEFORE INSERT ON chat_sessions
            BEGIN
                SELECT RAISE(ABORT, 'history write rejected');
            END
            """
        )
        self._store.commit()

        with self.assertRaises(PersistenceError):
            self._sessions.create_session("u1", "Doomed")

        chats = self._store.execute("SELECT COUNT(*) AS c FROM chats").fetchone()
        entries = self._store.execute("SELECT COUNT(*) AS c FROM chat_sessions").fetchone()
        self.assertEqual(0, int(chats["c"]))
        self.assertEqual(0, int(entries["c"]))

    def test_list_sessions_is_newest_first_and_per_user(self) -> None:
        first = self._sessions.create_session("u1", "first")
        second = self._sessions.create_session("u1", "second")
        self._sessions.create_session("u2", "other user")

        ids = [s.id for s in self._sessions.list_sessions("u1")]
        self.assertEqual([second.id, first.id], ids)

    def test_subscribe_delivers_current_list_then_every_change(self) -> None:
        existing = self._sessions.create_session("u1", "existing")
        deliveries: list[list[str]] = []

        subscription = self._sessions.subscribe("u1", lambda sessions: deliveries.append([s.id for s in sessions]))
        created = self._sessions.create_session("u1", "new")

        self.assertEqual([[existing.id], [created.id, existing.id]], deliveries)

        subscription.cancel()
        self._sessions.create_session("u1", "after cancel")
        self.assertEqual(2, len(deliveries))

    def test_subscribers_of_other_users_are_not_notified(self) -> None:
        deliveries: list[int] = []
        self._sessions.subscribe("u2", lambda sessions: deliveries.append(len(sessions)))

        self._sessions.create_session("u1", "not yours")

        self.assertEqual([0], deliveries)

    def test_ids_come_from_id_factory(self) -> None:
        from elevate_chat.store import SessionIndex

        ids = iter(["chat-a", "chat-b"])
        index = SessionIndex(self._store, id_factory=lambda: next(ids))
        self.assertEqual("chat-a", index.create_session("u1", "a").id)
        self.assertEqual("chat-b", index.create_session("u1", "b").id)

    def test_duplicate_id_is_a_persistence_error(self) -> None:
        from elevate_chat.store import SessionIndex

        index = SessionIndex(self._store, id_factory=lambda: "same")
        index.create_session("u1", "a")
        with self.assertRaises(PersistenceError):
            index.create_session("u1", "b")
        self.assertEqual(["a"], [s.title for s in index.list_sessions("u1")])
