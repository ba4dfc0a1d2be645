"""Subscription channels used to push snapshots and progress to the UI layer.

Contains:
- Subscription: Handle returned by EventChannel.subscribe
- EventChannel: Ordered fan-out of events to subscribed callbacks
"""

from typing import Callable, Generic, TypeVar

from loguru import logger

T = TypeVar("T")


class Subscription:
    """Handle for one subscribed listener. Call dispose() to unsubscribe."""

    def __init__(self, channel: "EventChannel", listener: Callable):
        self._channel = channel
        self._listener = listener
        self.active = True

    def dispose(self) -> None:
        if self.active:
            self._channel._remove(self._listener)
            self.active = False


class EventChannel(Generic[T]):
    """A named channel that delivers each emitted event to every listener.

    Listeners run synchronously in subscription order. A listener that
    raises is logged and skipped; the remaining listeners still receive
    the event and the emitter is never interrupted.
    """

    def __init__(self, name: str):
        self.name = name
        self._listeners: list[Callable[[T], None]] = []

    def subscribe(self, listener: Callable[[T], None]) -> Subscription:
        self._listeners.append(listener)
        return Subscription(self, listener)

    def emit(self, event: T) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Listener on '{self.name}' channel failed")

    def clear(self) -> None:
        self._listeners.clear()

    def _remove(self, listener: Callable) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def __len__(self) -> int:
        return len(self._listeners)
