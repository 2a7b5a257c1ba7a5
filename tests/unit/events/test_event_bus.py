#!/usr/bin/env python3
"""
Tests for the in-process event bus.

Usage:
    python -m pytest tests/unit/events/test_event_bus.py -v
"""

import threading
import time
import unittest

from matchmaking.events import MATCH_CREATED, Event, EventBus
from matchmaking.exceptions import (
    DuplicateSubscriptionError,
    EventBusClosedError,
    EventBusError,
)


class RecordingEventBus(EventBus):
    """Records event data in the order the dispatcher hands events out."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.dispatched = []

    def _spawn_handler(self, handler, event):
        self.dispatched.append(event.data)
        super()._spawn_handler(handler, event)


class TestSubscribe(unittest.TestCase):

    def test_second_subscription_rejected_first_kept(self):
        bus = EventBus()
        first = lambda event: "first"
        second = lambda event: "second"

        bus.subscribe(MATCH_CREATED, first)
        with self.assertRaises(DuplicateSubscriptionError):
            bus.subscribe(MATCH_CREATED, second)

        self.assertIs(bus._subscribers[MATCH_CREATED], first)

    def test_subscribe_after_start_rejected(self):
        bus = EventBus()
        bus.start()
        try:
            with self.assertRaises(EventBusError):
                bus.subscribe(MATCH_CREATED, lambda event: None)
        finally:
            bus.stop(timeout=5)

    def test_capacity_must_be_positive(self):
        with self.assertRaises(ValueError):
            EventBus(capacity=0)


class TestDispatch(unittest.TestCase):

    def test_events_reach_handler_in_order(self):
        received = []
        lock = threading.Lock()
        done = threading.Event()

        def handler(event: Event):
            with lock:
                received.append(event.data['n'])
                if len(received) == 5:
                    done.set()

        bus = EventBus(capacity=2)
        bus.subscribe(MATCH_CREATED, handler)
        with bus:
            for n in range(5):
                bus.publish(MATCH_CREATED, {'n': n})
            self.assertTrue(done.wait(5))

        self.assertEqual(sorted(received), [0, 1, 2, 3, 4])

    def test_dispatcher_hands_out_events_in_publish_order(self):
        bus = RecordingEventBus(capacity=3)
        bus.subscribe(MATCH_CREATED, lambda event: None)
        bus.subscribe("profile.updated", lambda event: None)
        with bus:
            for n in range(8):
                topic = MATCH_CREATED if n % 2 else "profile.updated"
                bus.publish(topic, n)

        self.assertEqual(bus.dispatched, list(range(8)))

    def test_publish_without_subscriber_does_not_block(self):
        bus = EventBus(capacity=1)
        with bus:
            with self.assertLogs('matchmaking.events.bus', level='WARNING') as logs:
                for _ in range(3):
                    bus.publish('profile.updated', {'id': 'x'})
                deadline = time.time() + 5
                while bus.pending() and time.time() < deadline:
                    time.sleep(0.01)
                time.sleep(0.05)

        self.assertTrue(any('No registered subscriber for profile.updated topic' in m for m in logs.output))

    def test_handler_failure_is_contained(self):
        calls = []

        def failing(event):
            calls.append(event.topic)
            raise RuntimeError("boom")

        bus = EventBus()
        bus.subscribe(MATCH_CREATED, failing)
        with self.assertLogs('matchmaking.events.bus', level='ERROR') as logs:
            with bus:
                bus.publish(MATCH_CREATED, {'match_id': 'm1'})

        self.assertEqual(calls, [MATCH_CREATED])
        self.assertTrue(any('Dispatch failed' in m for m in logs.output))

    def test_stop_drains_queued_events(self):
        received = []
        release = threading.Event()

        def slow(event):
            release.wait(5)
            received.append(event.data)

        bus = EventBus(capacity=10)
        bus.subscribe(MATCH_CREATED, slow)
        bus.start()
        for n in range(3):
            bus.publish(MATCH_CREATED, n)
        release.set()
        bus.stop(timeout=5)

        self.assertEqual(sorted(received), [0, 1, 2])
        self.assertFalse(bus.is_running)

    def test_publish_after_stop_raises(self):
        bus = EventBus()
        bus.start()
        bus.stop(timeout=5)
        with self.assertRaises(EventBusClosedError):
            bus.publish(MATCH_CREATED, {})

    def test_blocked_publisher_fails_when_bus_stops(self):
        bus = EventBus(capacity=1)
        bus.publish(MATCH_CREATED, 0)
        outcome = []

        def publisher():
            try:
                bus.publish(MATCH_CREATED, 1)
                outcome.append('queued')
            except EventBusClosedError:
                outcome.append('closed')

        thread = threading.Thread(target=publisher)
        thread.start()
        time.sleep(0.2)
        bus.stop(timeout=5)
        thread.join(5)

        self.assertFalse(thread.is_alive())
        self.assertEqual(outcome, ['closed'])
        self.assertEqual(bus.pending(), 1)

    def test_every_accepted_event_is_dispatched_across_stop(self):
        received = []
        lock = threading.Lock()

        def handler(event):
            with lock:
                received.append(event.data)

        bus = EventBus(capacity=2)
        bus.subscribe(MATCH_CREATED, handler)
        bus.start()
        accepted = []

        def publisher(worker):
            for n in range(50):
                try:
                    bus.publish(MATCH_CREATED, (worker, n))
                except EventBusClosedError:
                    return
                with lock:
                    accepted.append((worker, n))

        threads = [threading.Thread(target=publisher, args=(w,)) for w in range(4)]
        for t in threads:
            t.start()
        time.sleep(0.01)
        bus.stop(timeout=5)
        for t in threads:
            t.join(5)

        self.assertEqual(sorted(received), sorted(accepted))

    def test_cannot_restart(self):
        bus = EventBus()
        bus.start()
        bus.stop(timeout=5)
        with self.assertRaises(EventBusError):
            bus.start()


if __name__ == '__main__':
    unittest.main()
