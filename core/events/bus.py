#!/usr/bin/env python3
"""
In-process publish/subscribe event bus.

Each subscriber owns a FIFO queue drained by its own daemon thread, so:
- publish() only enqueues and returns immediately
- a slow subscriber never blocks the publisher or other subscribers
- events reach a given subscriber in publish order
- a handler exception is logged and isolated to that subscriber

There is no persistence, replay or back-pressure. Handlers must tolerate
duplicate delivery.
"""

import logging
import queue
import threading
from typing import Callable, Iterable, List, Optional

from core.events.types import DomainEvent, EventType

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]

_STOP = object()


class _Subscriber:
    """One listener with its own queue and worker thread."""

    def __init__(self, name: str, event_types: Iterable[EventType], handler: EventHandler):
        self.name = name
        self.event_types = frozenset(event_types)
        self.handler = handler
        self.queue: "queue.Queue" = queue.Queue()
        self.thread = threading.Thread(
            target=self._run,
            name=f"event-subscriber-{name}",
            daemon=True
        )

    def accepts(self, event: DomainEvent) -> bool:
        return event.type in self.event_types

    def _run(self):
        while True:
            event = self.queue.get()
            try:
                if event is _STOP:
                    return
                self.handler(event)
            except Exception:
                logger.exception(f"Subscriber '{self.name}' failed handling {event.type.value}")
            finally:
                self.queue.task_done()


class EventBus:
    """Fire-and-forget typed event channel.

    Usage:
        bus = EventBus()
        bus.subscribe([EventType.JOB_UPDATED], handle_job_updated)
        bus.publish(job_updated(job_id))
    """

    def __init__(self):
        self._subscribers: List[_Subscriber] = []
        self._lock = threading.Lock()
        self._closed = False

    def subscribe(
        self,
        event_types: Iterable[EventType],
        handler: EventHandler,
        name: Optional[str] = None
    ) -> None:
        """Register `handler` for the given event types and start its worker."""
        with self._lock:
            if self._closed:
                raise RuntimeError("Cannot subscribe to a closed event bus")
            subscriber = _Subscriber(
                name or getattr(handler, '__name__', f"subscriber-{len(self._subscribers)}"),
                event_types,
                handler
            )
            self._subscribers.append(subscriber)
        subscriber.thread.start()
        logger.debug(
            f"Subscribed '{subscriber.name}' to "
            f"{', '.join(sorted(t.value for t in subscriber.event_types))}"
        )

    def publish(self, event: DomainEvent) -> None:
        """Enqueue `event` for every interested subscriber and return."""
        with self._lock:
            if self._closed:
                logger.warning(f"Dropping {event.type.value}: event bus is closed")
                return
            targets = [s for s in self._subscribers if s.accepts(event)]
        for subscriber in targets:
            subscriber.queue.put(event)
        logger.debug(f"Published {event.type.value} to {len(targets)} subscriber(s)")

    def join(self) -> None:
        """Block until every event published so far has been handled."""
        with self._lock:
            subscribers = list(self._subscribers)
        for subscriber in subscribers:
            subscriber.queue.join()

    def close(self, timeout: Optional[float] = 5.0) -> None:
        """Stop all workers after they drain their queues."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            subscribers = list(self._subscribers)
        for subscriber in subscribers:
            subscriber.queue.put(_STOP)
        for subscriber in subscribers:
            subscriber.thread.join(timeout)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)
