#!/usr/bin/env python3
"""
Command-line driver for the matchmaking services.

Usage:
    python main.py init-db
    python main.py seed --count 100
    python main.py register
    python main.py discover <user_id> --max-distance 10 --min-age 25 --max-age 35
    python main.py discover <user_id> --ranked
    python main.py swipe <user_id> <prospect_id> [--pass]
    python main.py matches <user_id>
"""

import argparse
import json
import logging
import sys

from matchmaking.app_context import AppContext
from matchmaking.config_loader import load_config
from matchmaking.exceptions import MatchmakingError
from matchmaking.models import Preferences

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _print(data) -> None:
    print(json.dumps(data, indent=2, default=str))


def cmd_init_db(ctx: AppContext, args) -> None:
    # Tables are created while the context is built
    logger.info(f"Database ready at {ctx.config.database.url}")


def cmd_seed(ctx: AppContext, args) -> None:
    inserted = ctx.user_service.seed_default_users(args.count)
    _print({'inserted': inserted, 'total': ctx.user_store.count()})


def cmd_register(ctx: AppContext, args) -> None:
    _print(ctx.user_service.register().model_dump(mode='json'))


def cmd_discover(ctx: AppContext, args) -> None:
    viewer = ctx.user_service.get_profile(args.user_id)
    user_filter = {
        'max_distance': args.max_distance,
        'min_age': args.min_age,
        'max_age': args.max_age,
        'min_height': args.min_height,
        'max_height': args.max_height,
    }
    user_filter = {k: v for k, v in user_filter.items() if v is not None}

    if args.ranked:
        ranked = ctx.discovery_service.discover_ranked(viewer, Preferences(), user_filter)
        _print([
            {'score': r.score, **r.candidate.model_dump(mode='json')}
            for r in ranked[:args.limit]
        ])
    else:
        candidates = ctx.discovery_service.discover(viewer, user_filter)
        _print([c.model_dump(mode='json') for c in candidates[:args.limit]])


def cmd_swipe(ctx: AppContext, args) -> None:
    response = ctx.swipe_service.swipe(args.user_id, {
        'prospect_id': args.prospect_id,
        'interested': not args.pass_,
    })
    _print(response.model_dump(mode='json', exclude_none=True))


def cmd_matches(ctx: AppContext, args) -> None:
    info = ctx.match_service.get_matches(args.user_id)
    _print({
        'user': info.current_user.id,
        'matched_users': [u.model_dump(mode='json') for u in info.matched_users],
    })


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Matchmaking driver")
    parser.add_argument('--config', default='config.yaml', help='Path to config.yaml')
    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('init-db', help='Create tables').set_defaults(func=cmd_init_db)

    seed = sub.add_parser('seed', help='Top the store up with random profiles')
    seed.add_argument('--count', type=int, default=None, help='Target profile count')
    seed.set_defaults(func=cmd_seed)

    sub.add_parser('register', help='Create one random profile').set_defaults(func=cmd_register)

    discover = sub.add_parser('discover', help='List candidates for a user')
    discover.add_argument('user_id')
    discover.add_argument('--max-distance', type=int, default=None, help='km')
    discover.add_argument('--min-age', type=int, default=None)
    discover.add_argument('--max-age', type=int, default=None)
    discover.add_argument('--min-height', type=int, default=None)
    discover.add_argument('--max-height', type=int, default=None)
    discover.add_argument('--limit', type=int, default=20)
    discover.add_argument('--ranked', action='store_true', help='Order by swipe score')
    discover.set_defaults(func=cmd_discover)

    swipe = sub.add_parser('swipe', help='Record a swipe')
    swipe.add_argument('user_id')
    swipe.add_argument('prospect_id')
    swipe.add_argument('--pass', dest='pass_', action='store_true', help='Not interested')
    swipe.set_defaults(func=cmd_swipe)

    matches = sub.add_parser('matches', help="List a user's matches")
    matches.add_argument('user_id')
    matches.set_defaults(func=cmd_matches)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)

    ctx = AppContext.build(config)
    with ctx:
        try:
            args.func(ctx, args)
        except MatchmakingError as e:
            logger.error(f"{args.command} failed: {e}")
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
