#!/usr/bin/env python3
"""
Match Notification Service

Consumes match.created events from the in-process bus and turns each one
into a notification job. Jobs go to a Redis Queue when one is configured
and reachable; otherwise they are processed synchronously on the handler
thread.

Usage:
    from notification.service import MatchNotificationService

    service = MatchNotificationService(config.notifications)
    service.register(event_bus)
"""

import logging
import os
import uuid
from typing import Any, Dict, List, Mapping, Optional

from redis import Redis
from rq import Queue, Retry

from matchmaking.config_loader import NotificationConfig
from matchmaking.events import MATCH_CREATED, Event
from matchmaking.interfaces import EventSink
from notification.message_builder import MatchMessageBuilder, NameLookup

logger = logging.getLogger(__name__)

DEFAULT_REDIS_URL = 'redis://localhost:6379/0'


class MatchNotificationService:
    """
    Queues one notification job per created match.

    Args:
        config: Notification section of the app config
        redis_url: Overrides config.redis_url and the REDIS_URL env var
        name_lookup: Resolves profile ids to display names in sync mode
    """

    def __init__(
        self,
        config: Optional[NotificationConfig] = None,
        redis_url: Optional[str] = None,
        name_lookup: Optional[NameLookup] = None
    ):
        self.config = config or NotificationConfig()
        self.name_lookup = name_lookup
        self.redis_url = redis_url or self.config.redis_url or os.environ.get('REDIS_URL', DEFAULT_REDIS_URL)

        if not self.config.use_async_queue:
            logger.info("Async queue disabled via config. Using sync mode.")
            self.redis_conn = None
            self.queue = None
            self.async_mode = False
        else:
            try:
                self.redis_conn = Redis.from_url(self.redis_url)
                self.redis_conn.ping()
                self.queue = Queue(self.config.queue_name, connection=self.redis_conn)
                self.async_mode = True
                logger.info(f"Notification service connected to Redis queue '{self.config.queue_name}'")
            except Exception as e:
                logger.error(f"Redis connection failed: {e}. Falling back to sync mode.")
                self.redis_conn = None
                self.queue = None
                self.async_mode = False

    def register(self, events: EventSink) -> None:
        """Subscribe to match.created on the given bus (before it starts)."""
        events.subscribe(MATCH_CREATED, self.handle_match_created)

    def handle_match_created(self, event: Event) -> Optional[str]:
        data = event.data if isinstance(event.data, Mapping) else {}
        match_id = data.get('match_id')
        profiles = list(data.get('profiles') or [])
        if not match_id or len(profiles) != 2:
            logger.warning(f"Ignoring malformed {event.topic} event: {event.data!r}")
            return None
        return self.notify_match(match_id, profiles)

    def notify_match(self, match_id: str, profiles: List[str]) -> str:
        """
        Queue or process the notification for one match.

        Returns:
            RQ job id in async mode, notification id in sync mode
        """
        notification_data = {
            'match_id': match_id,
            'profiles': list(profiles),
        }

        if self.async_mode:
            job = self.queue.enqueue(
                process_match_notification,
                notification_data,
                job_timeout='5m',
                result_ttl=86400,
                retry=Retry(max=3, interval=[30, 60, 120])
            )
            logger.info(f"Queued match notification for {match_id} as job {job.id}")
            return job.id

        return process_match_notification(notification_data, self.name_lookup)

    def get_queue_status(self) -> Dict[str, Any]:
        if not self.async_mode:
            return {'status': 'sync_mode', 'queue_length': 0}

        try:
            return {
                'status': 'active',
                'queue_length': len(self.queue),
                'redis_connected': self.redis_conn.ping()
            }
        except Exception as e:
            return {'status': 'error', 'error': str(e)}


# Worker task - must be at module level for RQ
def process_match_notification(
    notification_data: Dict[str, Any],
    name_lookup: Optional[NameLookup] = None
) -> str:
    """
    Deliver the messages for one match (called by the RQ worker).

    Delivery is one log line per participant.
    """
    notification_id = str(uuid.uuid4())
    match_id = notification_data['match_id']
    profiles = notification_data['profiles']

    logger.info(f"Processing notification {notification_id} for match {match_id}")

    messages = MatchMessageBuilder(name_lookup).build(match_id, profiles)
    for message in messages:
        logger.info(
            f"Notify {message.recipient_id}: {message.subject} {message.body} "
            f"(match {message.match_id})"
        )

    return notification_id
