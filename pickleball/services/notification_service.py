import logging
import queue
import threading
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from pydantic import BaseModel

from pickleball.models.notification import ChangeEvent, EventType

logger = logging.getLogger(__name__)

_CLOSED = object()


class Subscription:
    """
    A stream of ChangeEvents for one record kind, optionally narrowed by
    equality filters on record fields (e.g. ``id=<match id>`` or
    ``tournament_id=<id>``). Backed by a bounded queue: when the consumer
    falls behind, new events are dropped and counted, never blocking the
    publisher.
    """

    def __init__(self, service: "NotificationService", kind: str, filters: Dict[str, Any], maxsize: int):
        self._service = service
        self.kind = kind
        self.filters = filters
        self._queue: "queue.Queue" = queue.Queue(maxsize=maxsize)
        self.dropped = 0
        self.closed = False

    def matches(self, kind: str, record: Dict[str, Any]) -> bool:
        if kind != self.kind:
            return False
        return all(record.get(name) == value for name, value in self.filters.items())

    def deliver(self, event: ChangeEvent) -> None:
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            self.dropped += 1
            raise

    def get(self, timeout: Optional[float] = None) -> ChangeEvent:
        """Blocks up to ``timeout`` seconds. Raises queue.Empty on timeout."""
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            raise queue.Empty("Subscription closed")
        return item

    def drain(self) -> List[ChangeEvent]:
        """Returns every event currently buffered without blocking."""
        events = []
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return events
            if item is not _CLOSED:
                events.append(item)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._service._unsubscribe(self)
        try:
            self._queue.put_nowait(_CLOSED)
        except queue.Full:
            pass # consumer will stop once it drains the backlog and sees ``closed``

    def __iter__(self) -> Iterator[ChangeEvent]:
        while True:
            if self.closed and self._queue.empty():
                return
            item = self._queue.get()
            if item is _CLOSED:
                return
            yield item

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class NotificationService:
    """
    Fan-out of committed mutations to interested observers (referee and
    audience views). Publishing is fire-and-forget: it never raises, so the
    outcome of the mutation that triggered it never depends on delivery.
    """

    def __init__(self, queue_size: int = 256):
        self.queue_size = queue_size
        self._lock = threading.Lock()
        self._subscriptions: List[Subscription] = []

    def subscribe(self, kind: Any, **filters: Any) -> Subscription:
        kind_value = kind.value if isinstance(kind, Enum) else str(kind)
        normalized = {name: value.value if isinstance(value, Enum) else value for name, value in filters.items()}
        subscription = Subscription(self, kind_value, normalized, self.queue_size)
        with self._lock:
            self._subscriptions.append(subscription)
        logger.debug("New subscription on %s %s", kind_value, normalized)
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def publish(self, event_type: EventType, kind: Any, record: BaseModel) -> int:
        """Delivers one change to every matching subscriber. Returns how many received it."""
        delivered = 0
        try:
            kind_value = kind.value if isinstance(kind, Enum) else str(kind)
            event = ChangeEvent(event_type=event_type, kind=kind_value, record=record.model_dump(mode="json"))
            with self._lock:
                targets = list(self._subscriptions)
        except Exception:
            logger.exception("Could not build change event for %s", kind)
            return 0

        for subscription in targets:
            try:
                if subscription.matches(event.kind, event.record):
                    subscription.deliver(event)
                    delivered += 1
            except queue.Full:
                logger.warning("Subscriber on %s is full, dropped %s event", subscription.kind, event.event_type)
            except Exception:
                logger.exception("Delivery to subscriber on %s failed", subscription.kind)
        return delivered
