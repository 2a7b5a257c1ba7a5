#!/usr/bin/env python3
"""
Tests for the match notification consumer.

Usage:
    python -m pytest tests/unit/notification/test_notification_service.py -v
"""

import unittest
from unittest.mock import MagicMock, Mock, patch

from matchmaking.config_loader import NotificationConfig
from matchmaking.events import MATCH_CREATED, Event, EventBus
from notification import MatchMessageBuilder, MatchNotificationService, process_match_notification


class TestMessageBuilder(unittest.TestCase):

    def test_one_message_per_participant(self):
        names = {'a': 'Ana', 'b': 'Ben'}
        messages = MatchMessageBuilder(names.get).build('m1', ['a', 'b'])

        self.assertEqual([m.recipient_id for m in messages], ['a', 'b'])
        self.assertIn('Ben', messages[0].body)
        self.assertIn('Ana', messages[1].body)
        self.assertEqual(messages[0].metadata, {'match_id': 'm1'})

    def test_falls_back_to_profile_id(self):
        messages = MatchMessageBuilder().build('m1', ['a', 'b'])
        self.assertIn('b', messages[0].body)

    def test_requires_two_profiles(self):
        with self.assertRaises(ValueError):
            MatchMessageBuilder().build('m1', ['a'])


class TestSyncMode(unittest.TestCase):

    def setUp(self):
        self.service = MatchNotificationService(NotificationConfig(enabled=True, use_async_queue=False))

    def test_sync_mode_when_queue_disabled(self):
        self.assertFalse(self.service.async_mode)
        self.assertEqual(self.service.get_queue_status(), {'status': 'sync_mode', 'queue_length': 0})

    def test_handle_event_processes_inline(self):
        with patch('notification.service.process_match_notification', return_value='n1') as process:
            result = self.service.handle_match_created(
                Event(MATCH_CREATED, {'match_id': 'm1', 'profiles': ['a', 'b']})
            )

        self.assertEqual(result, 'n1')
        process.assert_called_once_with({'match_id': 'm1', 'profiles': ['a', 'b']}, None)

    def test_malformed_event_ignored(self):
        with patch('notification.service.process_match_notification') as process:
            self.assertIsNone(self.service.handle_match_created(Event(MATCH_CREATED, {'match_id': 'm1'})))
            self.assertIsNone(self.service.handle_match_created(Event(MATCH_CREATED, "m1")))
        process.assert_not_called()

    def test_register_subscribes_to_match_created(self):
        bus = EventBus()
        self.service.register(bus)
        self.assertTrue(bus.has_subscriber(MATCH_CREATED))


class TestAsyncMode(unittest.TestCase):

    @patch('notification.service.Queue')
    @patch('notification.service.Redis')
    def test_one_job_per_match_event(self, mock_redis, mock_queue):
        queue = MagicMock()
        queue.enqueue.return_value = Mock(id='job-1')
        mock_queue.return_value = queue

        service = MatchNotificationService(NotificationConfig(enabled=True), redis_url='redis://test:6379/0')
        job_id = service.handle_match_created(Event(MATCH_CREATED, {'match_id': 'm1', 'profiles': ['a', 'b']}))

        self.assertTrue(service.async_mode)
        mock_redis.from_url.assert_called_once_with('redis://test:6379/0')
        self.assertEqual(job_id, 'job-1')
        queue.enqueue.assert_called_once()
        args, kwargs = queue.enqueue.call_args
        self.assertIs(args[0], process_match_notification)
        self.assertEqual(args[1], {'match_id': 'm1', 'profiles': ['a', 'b']})
        self.assertIn('retry', kwargs)

    @patch('notification.service.Redis')
    def test_falls_back_to_sync_when_redis_unreachable(self, mock_redis):
        mock_redis.from_url.return_value.ping.side_effect = ConnectionError("refused")

        with self.assertLogs('notification.service', level='ERROR'):
            service = MatchNotificationService(NotificationConfig(enabled=True))

        self.assertFalse(service.async_mode)

    def test_process_returns_notification_id(self):
        with self.assertLogs('notification.service', level='INFO') as logs:
            notification_id = process_match_notification({'match_id': 'm1', 'profiles': ['a', 'b']})

        self.assertTrue(notification_id)
        self.assertEqual(sum('Notify ' in m for m in logs.output), 2)


class TestWorker(unittest.TestCase):

    @patch('notification.worker.Worker')
    @patch('notification.worker.Redis')
    def test_worker_uses_configured_queue(self, mock_redis, mock_worker):
        from notification.worker import build_worker

        config = NotificationConfig(queue_name='matches', redis_url='redis://test:6379/2')
        build_worker(config)

        mock_redis.from_url.assert_called_once_with('redis://test:6379/2')
        mock_worker.assert_called_once_with(['matches'], connection=mock_redis.from_url.return_value)


if __name__ == '__main__':
    unittest.main()
