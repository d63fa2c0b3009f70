"""Notification channel — websocket events fanned out to subscribers.

Usage::

    client = UtopiaClient(token, notifications=True)
    client.on("incomingMessage", lambda event: print(event.payload))

    for event in client.events("newEmail"):
        print(event.type)
"""

from __future__ import annotations

import enum
import json
import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator

from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.sync.client import connect as ws_connect

from utopia import protocol
from utopia.errors import ChannelClosedError, MalformedFrameError, NotificationSetupError

log = logging.getLogger(__name__)


class EventCategory(str, enum.Enum):
    ANY = protocol.EVT_ANY
    NEW_OUTGOING_CHANNEL_MESSAGE = protocol.EVT_NEW_OUTGOING_CHANNEL_MESSAGE
    NEW_CHANNEL_MESSAGE = protocol.EVT_NEW_CHANNEL_MESSAGE
    NEW_OUTGOING_INSTANT_MESSAGE = protocol.EVT_NEW_OUTGOING_INSTANT_MESSAGE
    NEW_INSTANT_MESSAGE = protocol.EVT_NEW_INSTANT_MESSAGE
    MESSAGE = protocol.EVT_MESSAGE
    CHANNEL_JOIN_CHANGED = protocol.EVT_CHANNEL_JOIN_CHANGED
    NEW_PAYMENT_TRANSFER = protocol.EVT_NEW_PAYMENT_TRANSFER
    NEW_EMAIL = protocol.EVT_NEW_EMAIL
    # Derived from the event type, never sent by the server
    OUTGOING_MESSAGE = protocol.EVT_OUTGOING_MESSAGE
    INCOMING_MESSAGE = protocol.EVT_INCOMING_MESSAGE


_DERIVED: tuple[tuple[EventCategory, str], ...] = (
    (EventCategory.OUTGOING_MESSAGE, "outgoing"),
    (EventCategory.INCOMING_MESSAGE, "incoming"),
    (EventCategory.MESSAGE, "message"),
)


def classify(event_type: str) -> tuple[EventCategory, ...]:
    """Return the categories an event of *event_type* is delivered to, in order.

    ``any`` always comes first, then the exact category (if *event_type* names
    one), then each derived category whose keyword appears in the type,
    case-insensitively. A category appears at most once.
    """
    categories = [EventCategory.ANY]
    try:
        exact = EventCategory(event_type)
    except ValueError:
        exact = None
    if exact is not None and exact not in categories:
        categories.append(exact)

    lowered = event_type.lower()
    for category, keyword in _DERIVED:
        if keyword in lowered and category not in categories:
            categories.append(category)
    return tuple(categories)


@dataclass(frozen=True)
class Event:
    """One decoded notification frame."""
    type: str
    payload: dict[str, Any] = field(default_factory=dict)


def parse_frame(raw: str | bytes) -> Event:
    """Decode an inbound frame. Raises MalformedFrameError if it isn't an event."""
    try:
        data = json.loads(raw)
    except (TypeError, ValueError, RecursionError) as exc:
        raise MalformedFrameError(f"frame is not JSON: {exc}") from exc
    if not isinstance(data, dict) or not isinstance(data.get("type"), str):
        raise MalformedFrameError("frame has no string 'type' field")
    return Event(type=data["type"], payload=data)


@dataclass(eq=False)
class _Subscription:
    callback: Callable[[Event], Any]
    once: bool = False


_CLOSED = object()


class EventStream:
    """Blocking iterator over the events of one category.

    Iteration ends when the notification channel closes or the stream is
    closed. ``get()`` raises ChannelClosedError in that case instead.
    """

    def __init__(self, registry: SubscriptionRegistry, category: EventCategory) -> None:
        self.category = category
        self._registry = registry
        self._queue: queue.SimpleQueue = queue.SimpleQueue()
        self._finished = False

    def _put(self, item: Any) -> None:
        self._queue.put(item)

    def get(self, timeout: float | None = None) -> Event:
        if self._finished:
            raise ChannelClosedError("notification channel is closed")
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            raise TimeoutError(f"no {self.category.value!r} event within {timeout}s") from None
        if item is _CLOSED:
            self._finished = True
            raise ChannelClosedError("notification channel is closed")
        return item

    def close(self) -> None:
        self._registry._detach(self)
        self._put(_CLOSED)

    def __enter__(self) -> EventStream:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __iter__(self) -> Iterator[Event]:
        return self._iter_events()

    def _iter_events(self) -> Iterator[Event]:
        while True:
            try:
                yield self.get()
            except ChannelClosedError:
                return


class SubscriptionRegistry:
    """Subscribers and pull streams per event category.

    Mutated from any thread; dispatched from the reader thread. Dispatch
    works on a copy taken under the lock, so subscribers may subscribe or
    unsubscribe from inside a callback.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscriptions: dict[EventCategory, list[_Subscription]] = {c: [] for c in EventCategory}
        self._streams: dict[EventCategory, list[EventStream]] = {c: [] for c in EventCategory}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    # --- Subscriptions -----------------------------------------------------

    def on(self, category: EventCategory | str, callback: Callable[[Event], Any]) -> None:
        self._add(EventCategory(category), _Subscription(callback))

    def once(self, category: EventCategory | str, callback: Callable[[Event], Any]) -> None:
        self._add(EventCategory(category), _Subscription(callback, once=True))

    def _add(self, category: EventCategory, subscription: _Subscription) -> None:
        with self._lock:
            self._subscriptions[category].append(subscription)

    def remove_listener(self, category: EventCategory | str, callback: Callable[[Event], Any]) -> bool:
        """Remove the most recent registration of *callback*; False if there was none."""
        category = EventCategory(category)
        with self._lock:
            subscriptions = self._subscriptions[category]
            for i in range(len(subscriptions) - 1, -1, -1):
                if subscriptions[i].callback == callback:
                    del subscriptions[i]
                    return True
        return False

    def listener_count(self, category: EventCategory | str) -> int:
        with self._lock:
            return len(self._subscriptions[EventCategory(category)])

    # --- Pull streams ------------------------------------------------------

    def stream(self, category: EventCategory | str) -> EventStream:
        category = EventCategory(category)
        stream = EventStream(self, category)
        with self._lock:
            if self._closed:
                stream._put(_CLOSED)
            else:
                self._streams[category].append(stream)
        return stream

    def _detach(self, stream: EventStream) -> None:
        with self._lock:
            streams = self._streams[stream.category]
            if stream in streams:
                streams.remove(stream)

    # --- Dispatch ----------------------------------------------------------

    def dispatch(self, event: Event) -> int:
        """Deliver *event* to every matching category. Returns the callback count."""
        delivered = 0
        for category in classify(event.type):
            with self._lock:
                if self._closed:
                    return delivered
                subscriptions = list(self._subscriptions[category])
                streams = list(self._streams[category])
                fired_once = [s for s in subscriptions if s.once]
                if fired_once:
                    self._subscriptions[category] = [
                        s for s in self._subscriptions[category] if s not in fired_once
                    ]

            for stream in streams:
                stream._put(event)
            for subscription in subscriptions:
                try:
                    subscription.callback(event)
                except Exception:
                    log.exception("subscriber %r failed on %s event", subscription.callback, category.value)
                delivered += 1
        return delivered

    def close(self) -> None:
        """Stop dispatching and end every pull stream."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            streams = [s for per_category in self._streams.values() for s in per_category]
            for per_category in self._streams.values():
                per_category.clear()
        for stream in streams:
            stream._put(_CLOSED)


class ChannelState(enum.Enum):
    UNOPENED = "unopened"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class NotificationChannel:
    """Websocket reader thread feeding a SubscriptionRegistry.

    The channel is opened once and never reconnects. When the socket closes
    the registry is closed too, which ends every pull stream.
    """

    def __init__(
        self,
        url: str,
        registry: SubscriptionRegistry,
        *,
        connect: Callable[..., Any] = ws_connect,
        open_timeout: float = 10.0,
    ) -> None:
        self._url = url
        self._registry = registry
        self._connect = connect
        self._open_timeout = open_timeout
        self._ws: Any = None
        self._thread: threading.Thread | None = None
        self._state = ChannelState.UNOPENED
        self._closed = threading.Event()

    @property
    def state(self) -> ChannelState:
        return self._state

    def open(self) -> None:
        if self._state is not ChannelState.UNOPENED:
            raise NotificationSetupError(f"notification channel is {self._state.value}")
        self._state = ChannelState.CONNECTING
        where = self._url.split("?", 1)[0]
        try:
            self._ws = self._connect(self._url, open_timeout=self._open_timeout)
        except (OSError, TimeoutError, WebSocketException) as exc:
            self._finish()
            raise NotificationSetupError(f"couldn't connect to {where}: {exc}") from exc

        self._state = ChannelState.OPEN
        log.info("notification channel open on %s", where)
        self._thread = threading.Thread(
            target=self._read_loop, name="utopia-notifications", daemon=True,
        )
        self._thread.start()

    def _read_loop(self) -> None:
        try:
            for raw in self._ws:
                try:
                    event = parse_frame(raw)
                except MalformedFrameError as exc:
                    log.warning("dropping notification frame: %s", exc)
                    continue
                self._registry.dispatch(event)
        except ConnectionClosed as exc:
            log.info("notification channel closed: %s", exc)
        except Exception:
            log.exception("notification reader stopped")
        finally:
            self._finish()

    def _finish(self) -> None:
        self._state = ChannelState.CLOSED
        self._registry.close()
        self._closed.set()

    def wait_closed(self, timeout: float | None = None) -> bool:
        return self._closed.wait(timeout)

    def close(self, timeout: float = 5.0) -> None:
        if self._ws is not None:
            self._ws.close()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        if self._state is ChannelState.UNOPENED:
            self._finish()
