"""
Listener bookkeeping for event-emitting transports.
"""

from collections import defaultdict
from typing import Any, Dict, List, Optional

from linesocket.transport.protocol import Listener


class EventSubscription:
    """A registered listener, owned by whoever subscribed it."""

    __slots__ = ("_emitter", "event", "listener", "once", "_active")

    def __init__(self, emitter: "EventEmitter", event: str, listener: Listener, once: bool):
        self._emitter = emitter
        self.event = event
        self.listener = listener
        self.once = once
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if self._active:
            self._active = False
            self._emitter._discard(self)

    def __repr__(self) -> str:
        state = "active" if self._active else "cancelled"
        return f"<EventSubscription {self.event!r} once={self.once} {state}>"


class EventEmitter:
    """Synchronous notification dispatch with explicit subscription handles.

    Listeners run in subscription order on the caller's thread. A single-shot
    subscription is deactivated before its listener runs, and listeners added
    while an event is being emitted only see later emissions.
    """

    def __init__(self):
        self._subscriptions: Dict[str, List[EventSubscription]] = defaultdict(list)

    def on(self, event: str, listener: Listener) -> EventSubscription:
        return self._subscribe(event, listener, once=False)

    def once(self, event: str, listener: Listener) -> EventSubscription:
        return self._subscribe(event, listener, once=True)

    def remove_all_listeners(self, event: Optional[str] = None) -> None:
        events = [event] if event is not None else list(self._subscriptions)
        for name in events:
            for subscription in list(self._subscriptions.get(name, ())):
                subscription.cancel()

    def listener_count(self, event: str) -> int:
        return len(self._subscriptions.get(event, ()))

    def emit(self, event: str, *args: Any) -> bool:
        """Deliver a notification.

        Returns:
            True if at least one listener was called.
        """
        delivered = False
        for subscription in list(self._subscriptions.get(event, ())):
            if not subscription.active:
                continue
            if subscription.once:
                subscription.cancel()
            subscription.listener(*args)
            delivered = True
        return delivered

    def _subscribe(self, event: str, listener: Listener, once: bool) -> EventSubscription:
        subscription = EventSubscription(self, event, listener, once)
        self._subscriptions[event].append(subscription)
        return subscription

    def _discard(self, subscription: EventSubscription) -> None:
        listeners = self._subscriptions.get(subscription.event)
        if listeners and subscription in listeners:
            listeners.remove(subscription)
            if not listeners:
                del self._subscriptions[subscription.event]
