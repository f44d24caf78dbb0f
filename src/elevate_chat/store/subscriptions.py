from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

from loguru import logger

T = TypeVar("T")


class ListenerSubscription:
    def __init__(self, on_cancel: Callable[[], None]):
        self._on_cancel: Callable[[], None] | None = on_cancel

    @property
    def active(self) -> bool:
        return self._on_cancel is not None

    def cancel(self) -> None:
        if self._on_cancel is None:
            return
        on_cancel, self._on_cancel = self._on_cancel, None
        on_cancel()


class ChangeNotifier(Generic[T]):
    """Keyed listener registry.

    Listeners for a key are called in registration order. A listener that
    raises is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Callable[[T], None]]] = {}

    def add(self, key: str, listener: Callable[[T], None]) -> ListenerSubscription:
        self._listeners.setdefault(key, []).append(listener)
        return ListenerSubscription(lambda: self._remove(key, listener))

    def has_listeners(self, key: str) -> bool:
        return bool(self._listeners.get(key))

    def listener_count(self, key: str) -> int:
        return len(self._listeners.get(key, []))

    def notify(self, key: str, value: T) -> None:
        for listener in list(self._listeners.get(key, [])):
            try:
                listener(value)
            except Exception as ex:
                logger.error(f"Listener for {key!r} failed: {ex}")

    def _remove(self, key: str, listener: Callable[[T], None]) -> None:
        listeners = self._listeners.get(key)
        if not listeners:
            return
        try:
            listeners.remove(listener)
        except ValueError:
            return
        if not listeners:
            del self._listeners[key]
