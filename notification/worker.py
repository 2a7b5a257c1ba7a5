#!/usr/bin/env python3
"""
RQ worker for match notifications.

Drains the queue MatchNotificationService enqueues to. Queue name and Redis
URL come from the notifications section of config.yaml unless given on the
command line.

Usage:
    python -m notification.worker
    python -m notification.worker --burst
    python -m notification.worker --config config.yaml --verbose
"""

import argparse
import logging
import sys
from typing import List, Optional

from redis import Redis
from rq import Worker

from matchmaking.config_loader import NotificationConfig, load_config
from notification.service import DEFAULT_REDIS_URL

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_worker(config: NotificationConfig, queues: Optional[List[str]] = None) -> Worker:
    redis_conn = Redis.from_url(config.redis_url or DEFAULT_REDIS_URL)
    redis_conn.ping()
    return Worker(queues or [config.queue_name], connection=redis_conn)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Match notification worker')
    parser.add_argument('--config', default='config.yaml')
    parser.add_argument('--burst', action='store_true', help='Process all queued jobs and exit')
    parser.add_argument('--queues', nargs='+', default=None, help='Overrides notifications.queue_name')
    parser.add_argument('--verbose', action='store_true')
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = load_config(args.config).notifications
    try:
        worker = build_worker(config, args.queues)
    except Exception as e:
        logger.error(f"Cannot start worker: {e}")
        return 1

    logger.info(f"Worker listening on {', '.join(q.name for q in worker.queues)} (burst={args.burst})")
    try:
        worker.work(burst=args.burst)
    except KeyboardInterrupt:
        logger.info("Worker stopped")
    return 0


if __name__ == '__main__':
    sys.exit(main())
