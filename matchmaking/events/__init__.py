"""
Event Module

Usage:
    from matchmaking.events import EventBus, MATCH_CREATED

    bus = EventBus(capacity=10)
    bus.subscribe(MATCH_CREATED, handler)
    bus.start()
    bus.publish(MATCH_CREATED, {"match_id": "m1", "profiles": ["a", "b"]})
    bus.stop()
"""

from matchmaking.events.bus import (
    DEFAULT_QUEUE_CAPACITY,
    Event,
    EventBus,
    SubscriptionHandler,
)
from matchmaking.events.topics import MATCH_CREATED

__all__ = [
    'DEFAULT_QUEUE_CAPACITY',
    'Event',
    'EventBus',
    'SubscriptionHandler',
    'MATCH_CREATED',
]
