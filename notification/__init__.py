"""
Notification Module

Turns match.created events into queued notification jobs.

Usage:
    from notification import MatchNotificationService

    service = MatchNotificationService(config.notifications)
    service.register(event_bus)
"""

from notification.message_builder import (
    MatchMessageBuilder,
    MatchNotificationContent,
)

from notification.service import (
    MatchNotificationService,
    process_match_notification,
)

__all__ = [
    'MatchMessageBuilder',
    'MatchNotificationContent',
    'MatchNotificationService',
    'process_match_notification',
]
