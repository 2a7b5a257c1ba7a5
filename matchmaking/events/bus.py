#!/usr/bin/env python3
"""
In-process Event Bus

A bounded publish/subscribe channel that decouples the swipe/match flow from
its downstream consumers (notifications, analytics).

- One handler per topic, registered before the dispatcher starts
- publish() blocks while the queue is full (backpressure, no timeout)
- A single dispatcher thread routes events in FIFO order
- Each handler runs on its own thread; failures are logged, never re-queued

Usage:
    bus = EventBus(capacity=10)
    bus.subscribe(MATCH_CREATED, on_match_created)

    with bus:
        bus.publish(MATCH_CREATED, {"match_id": "...", "profiles": [...]})
    # leaving the block drains queued events and waits for running handlers
"""

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Set

from matchmaking.interfaces import EventSink
from matchmaking.exceptions import (
    DispatchError,
    DuplicateSubscriptionError,
    EventBusClosedError,
    EventBusError,
)

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_CAPACITY = 10

# How long publish() holds the publish lock while waiting on a full queue
_PUT_POLL_SECONDS = 0.05


@dataclass(frozen=True)
class Event:
    """A published event. Only lives on the bus queue."""
    topic: str
    data: Any = None


SubscriptionHandler = Callable[[Event], Any]

# Queued by stop() to end the dispatcher loop after pending events.
_STOP = object()


class EventBus(EventSink):
    """Bounded FIFO event dispatcher with one handler per topic."""

    def __init__(self, capacity: int = DEFAULT_QUEUE_CAPACITY, name: str = "events"):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.name = name
        self.capacity = capacity
        self._queue: "queue.Queue[Any]" = queue.Queue(maxsize=capacity)
        self._subscribers: Dict[str, SubscriptionHandler] = {}
        self._dispatcher: Optional[threading.Thread] = None
        self._handler_threads: Set[threading.Thread] = set()
        self._handlers_lock = threading.Lock()
        # Guards the closed flag together with each enqueue
        self._publish_lock = threading.Lock()
        self._closed = False

    @property
    def is_running(self) -> bool:
        return self._dispatcher is not None and self._dispatcher.is_alive()

    def subscribe(self, topic: str, handler: SubscriptionHandler) -> None:
        """
        Register the handler for a topic.

        Raises:
            DuplicateSubscriptionError: the topic already has a handler
            EventBusError: the dispatcher has already started
        """
        if self._dispatcher is not None:
            raise EventBusError(f"Cannot subscribe to {topic}: dispatcher already started")
        if topic in self._subscribers:
            raise DuplicateSubscriptionError(f"duplicate subscription for topic: {topic}")
        self._subscribers[topic] = handler
        logger.debug(f"Subscribed handler for topic {topic}")

    def has_subscriber(self, topic: str) -> bool:
        return topic in self._subscribers

    def publish(self, topic: str, data: Any = None) -> None:
        """
        Enqueue an event, blocking while the queue is full.

        Raises:
            EventBusClosedError: stop() ran before the event could be queued
        """
        event = Event(topic=topic, data=data)
        while True:
            with self._publish_lock:
                if self._closed:
                    raise EventBusClosedError(f"Event bus '{self.name}' is stopped; dropped {topic}")
                try:
                    self._queue.put(event, timeout=_PUT_POLL_SECONDS)
                    return
                except queue.Full:
                    pass

    def pending(self) -> int:
        """Approximate number of queued, undispatched events."""
        return self._queue.qsize()

    def start(self) -> None:
        """Start the dispatcher thread. Subscriptions are frozen from here on."""
        if self._dispatcher is not None:
            raise EventBusError(f"Event bus '{self.name}' already started")
        if self._closed:
            raise EventBusClosedError(f"Event bus '{self.name}' cannot be restarted")
        self._dispatcher = threading.Thread(
            target=self._dispatch_loop,
            name=f"{self.name}-dispatcher",
            daemon=True,
        )
        self._dispatcher.start()
        logger.info(f"Event bus '{self.name}' started (capacity={self.capacity}, topics={sorted(self._subscribers)})")

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Stop accepting events, dispatch what is queued, then wait for handlers.

        Args:
            timeout: Seconds to wait for the dispatcher and for each running
                handler. None waits indefinitely.
        """
        with self._publish_lock:
            if self._closed:
                return
            self._closed = True

        if self._dispatcher is None:
            dropped = self._queue.qsize()
            if dropped:
                logger.warning(f"Event bus '{self.name}' stopped before start; {dropped} event(s) never dispatched")
            return

        self._queue.put(_STOP)
        self._dispatcher.join(timeout)
        if self._dispatcher.is_alive():
            logger.warning(f"Event bus '{self.name}' dispatcher did not finish within {timeout}s")

        with self._handlers_lock:
            running = list(self._handler_threads)
        for thread in running:
            thread.join(timeout)
        logger.info(f"Event bus '{self.name}' stopped")

    def __enter__(self) -> "EventBus":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def _dispatch_loop(self) -> None:
        while True:
            event = self._queue.get()
            try:
                if event is _STOP:
                    return

                handler = self._subscribers.get(event.topic)
                if handler is None:
                    logger.warning(f"No registered subscriber for {event.topic} topic")
                    continue

                self._spawn_handler(handler, event)
            finally:
                self._queue.task_done()

    def _spawn_handler(self, handler: SubscriptionHandler, event: Event) -> None:
        """Run the handler on its own thread. Called by the dispatcher in queue order."""
        thread = threading.Thread(
            target=self._invoke,
            args=(handler, event),
            name=f"{self.name}-{event.topic}",
            daemon=True,
        )
        with self._handlers_lock:
            self._handler_threads.add(thread)
        thread.start()

    def _invoke(self, handler: SubscriptionHandler, event: Event) -> None:
        try:
            handler(event)
        except Exception as e:
            error = DispatchError(event.topic, e)
            logger.error(f"Dispatch failed: {error}", exc_info=True)
        finally:
            with self._handlers_lock:
                self._handler_threads.discard(threading.current_thread())
