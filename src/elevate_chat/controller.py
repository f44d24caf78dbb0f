from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from functools import partial

from loguru import logger

from elevate_chat.errors import ChatError, ConcurrentSendError, PersistenceError, StreamError, ValidationError
from elevate_chat.interfaces import (
    IdentityProvider,
    MessageStoreProtocol,
    ProfileStoreProtocol,
    SessionIndexProtocol,
    Subscription,
)
from elevate_chat.models import ChatSession, Message, Notice, StreamingMessage, UserProfile, ViewState
from elevate_chat.provider import ResponseProvider
from elevate_chat.store.subscriptions import ChangeNotifier, ListenerSubscription
from elevate_chat.titles import derive_title

_VIEW = "view"
_NOTICE = "notice"


class ChatSessionController:
    """Owns the active chat and the in-flight bot reply for one signed-in user.

    All state changes happen on the event loop thread, one at a time. Store
    notifications arrive synchronously from the store calls made here, so a
    turn's writes and the view updates they cause are never interleaved with
    another transition.

    Switching chats while a reply is streaming does not cancel it: the reply
    is still persisted to the chat it was started in, and its placeholder is
    only part of ``merged_view()`` while that chat is active.
    """

    def __init__(
        self,
        *,
        identity: IdentityProvider,
        session_index: SessionIndexProtocol,
        message_store: MessageStoreProtocol,
        provider: ResponseProvider,
        profiles: ProfileStoreProtocol | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._identity = identity
        self._session_index = session_index
        self._message_store = message_store
        self._provider = provider
        self._profiles = profiles
        self._clock = clock

        self._active_chat_id: str | None = None
        self._streaming: StreamingMessage | None = None
        self._sessions: tuple[ChatSession, ...] = ()
        self._active_messages: tuple[Message, ...] = ()

        self._session_subscription: Subscription | None = None
        self._message_subscription: Subscription | None = None
        self._turn_task: asyncio.Task | None = None

        self._observers: ChangeNotifier[ViewState] = ChangeNotifier()
        self._notices: ChangeNotifier[Notice] = ChangeNotifier()
        self._batch_depth = 0
        self._dirty = False

    # --- observable state ---

    @property
    def active_chat_id(self) -> str | None:
        return self._active_chat_id

    @property
    def streaming_message(self) -> Message | None:
        return self._streaming.message if self._streaming is not None else None

    @property
    def sessions(self) -> tuple[ChatSession, ...]:
        return self._sessions

    @property
    def active_messages(self) -> tuple[Message, ...]:
        return self._active_messages

    @property
    def turn_in_flight(self) -> bool:
        return self._turn_task is not None and not self._turn_task.done()

    def merged_view(self) -> tuple[Message, ...]:
        if self._streaming is not None and self._streaming.chat_id == self._active_chat_id:
            return self._active_messages + (self._streaming.message,)
        return self._active_messages

    def view_state(self) -> ViewState:
        return ViewState(
            active_chat_id=self._active_chat_id,
            messages=self.merged_view(),
            sessions=self._sessions,
            is_streaming=self._streaming is not None,
        )

    def add_listener(self, callback: Callable[[ViewState], None]) -> ListenerSubscription:
        return self._observers.add(_VIEW, callback)

    def add_notice_listener(self, callback: Callable[[Notice], None]) -> ListenerSubscription:
        return self._notices.add(_NOTICE, callback)

    # --- lifecycle ---

    def start(self) -> None:
        """Subscribe to the signed-in user's chat history."""
        if self._session_subscription is not None:
            return
        user_id = self._identity.current_identity()
        if user_id is None:
            logger.debug("No signed-in user; chat history stays empty")
            return
        self._session_subscription = self._session_index.subscribe(user_id, self._on_sessions)

    def close(self) -> None:
        with self._batch():
            self._drop_subscriptions()

    def user_profile(self) -> UserProfile | None:
        user_id = self._identity.current_identity()
        if user_id is None or self._profiles is None:
            return None
        return self._profiles.get_profile(user_id)

    def sign_out(self) -> None:
        """Sign out and drop everything tied to the user.

        An in-flight reply is cancelled: it stops before its next write, so
        nothing is persisted once the identity is gone.
        """
        self._identity.sign_out()
        if self._turn_task is not None and not self._turn_task.done():
            self._turn_task.cancel()
            logger.info("Cancelled in-flight reply on sign-out")
        self._turn_task = None
        with self._batch():
            self._drop_subscriptions()
            self._streaming = None
            self._sessions = ()
            self._active_chat_id = None
            self._active_messages = ()
            self._mark_dirty()
        self._notices.notify(_NOTICE, Notice("signed_out", "Signed out"))

    # --- user actions ---

    def select_chat(self, chat_id: str | None) -> None:
        if chat_id == self._active_chat_id:
            return
        if chat_id is not None:
            if self._identity.current_identity() is None:
                self._report(ValidationError("Sign in to open a chat"))
                return
            if all(session.id != chat_id for session in self._sessions):
                self._report(ValidationError(f"Unknown chat: {chat_id}"))
                return
        self._activate(chat_id)

    def create_new_chat(self) -> None:
        self.select_chat(None)

    def send_prompt(self, text: str) -> asyncio.Task | None:
        """Start a turn for ``text`` and return its task without waiting for it.

        Returns ``None`` when the prompt is rejected; the reason is published
        as a notice and nothing else changes.
        """
        try:
            user_id = self._validate_send(text)
        except ChatError as ex:
            self._report(ex)
            return None

        self._turn_task = asyncio.get_running_loop().create_task(self._run_turn(user_id, text))
        return self._turn_task

    async def wait_for_turn(self) -> None:
        task = self._turn_task
        if task is not None and not task.done():
            await asyncio.wait({task})

    # --- turn ---

    def _validate_send(self, text: str) -> str:
        if not text or not text.strip():
            raise ValidationError("Message is empty")
        user_id = self._identity.current_identity()
        if user_id is None:
            raise ValidationError("Sign in to send messages")
        if self.turn_in_flight:
            raise ConcurrentSendError("Wait for the current reply to finish")
        return user_id

    async def _run_turn(self, user_id: str, text: str) -> None:
        try:
            chat_id = self._resolve_chat(user_id, text)
            self._message_store.append(chat_id, Message.user(text))
        except PersistenceError as ex:
            self._report(ex)
            return
        await self._stream_reply(chat_id, text)

    def _resolve_chat(self, user_id: str, text: str) -> str:
        if self._active_chat_id is not None:
            return self._active_chat_id
        session = self._session_index.create_session(user_id, derive_title(text, self._clock()))
        self._activate(session.id)
        return session.id

    async def _stream_reply(self, chat_id: str, prompt: str) -> None:
        placeholder = Message.placeholder()
        self._set_streaming(StreamingMessage(chat_id, placeholder))
        parts: list[str] = []
        try:
            async for fragment in self._provider.stream(prompt):
                parts.append(fragment)
                self._set_streaming(StreamingMessage(chat_id, replace(placeholder, text="".join(parts))))
        except asyncio.CancelledError:
            if self._streaming is not None and self._streaming.chat_id == chat_id:
                self._set_streaming(None)
            raise
        except Exception as ex:
            logger.warning(f"Reply stream for chat {chat_id} failed after {len(parts)} fragments: {ex}")
            self._set_streaming(None)
            self._report(StreamError(f"The reply could not be completed: {ex}"))
            return

        final_text = "".join(parts)
        with self._batch():
            try:
                self._message_store.append(chat_id, Message.bot(final_text))
            except PersistenceError as ex:
                self._report(ex)
            finally:
                self._streaming = None
                self._mark_dirty()
        logger.debug(f"Reply persisted to chat {chat_id}: chars={len(final_text)}")

    # --- state transitions ---

    def _activate(self, chat_id: str | None) -> None:
        if chat_id == self._active_chat_id:
            return
        with self._batch():
            if self._message_subscription is not None:
                self._message_subscription.cancel()
                self._message_subscription = None
            self._active_chat_id = chat_id
            self._active_messages = ()
            self._mark_dirty()
            if chat_id is not None:
                self._message_subscription = self._message_store.subscribe(
                    chat_id, partial(self._on_messages, chat_id)
                )
        logger.debug(f"Active chat: {chat_id or '-'}")

    def _on_sessions(self, sessions: Sequence[ChatSession]) -> None:
        self._sessions = tuple(sessions)
        self._mark_dirty()

    def _on_messages(self, chat_id: str, messages: Sequence[Message]) -> None:
        if chat_id != self._active_chat_id:
            return
        self._active_messages = tuple(messages)
        self._mark_dirty()

    def _set_streaming(self, streaming: StreamingMessage | None) -> None:
        self._streaming = streaming
        self._mark_dirty()

    def _drop_subscriptions(self) -> None:
        for subscription in (self._message_subscription, self._session_subscription):
            if subscription is not None:
                subscription.cancel()
        self._message_subscription = None
        self._session_subscription = None

    def _report(self, error: ChatError) -> None:
        logger.warning(f"{type(error).__name__}: {error}")
        self._notices.notify(_NOTICE, Notice(error.kind, str(error)))

    @contextmanager
    def _batch(self) -> Iterator[None]:
        self._batch_depth += 1
        try:
            yield
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and self._dirty:
                self._dirty = False
                self._observers.notify(_VIEW, self.view_state())

    def _mark_dirty(self) -> None:
        self._dirty = True
        if self._batch_depth == 0:
            self._dirty = False
            self._observers.notify(_VIEW, self.view_state())
