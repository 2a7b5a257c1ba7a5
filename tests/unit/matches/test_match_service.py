import unittest
from unittest.mock import Mock

from database.repositories import InMemoryMatchRepository, InMemoryUserRepository
from matchmaking.exceptions import StorageError, UserNotFoundError
from matchmaking.matches import MatchService
from matchmaking.models import Match
from tests.mocks.profiles import make_user


class TestMatchService(unittest.TestCase):

    def setUp(self):
        self.users = InMemoryUserRepository()
        self.matches = InMemoryMatchRepository()
        self.service = MatchService(self.matches, self.users)
        for user_id in ('alice', 'bob', 'carol', 'dave'):
            self.users.create(make_user(user_id))

    def test_lists_other_profiles(self):
        self.matches.create(Match(profiles=['alice', 'bob']))
        self.matches.create(Match(profiles=['carol', 'alice']))
        self.matches.create(Match(profiles=['bob', 'dave']))

        info = self.service.get_matches('alice')

        self.assertEqual(info.current_user.id, 'alice')
        self.assertEqual([u.id for u in info.matched_users], ['bob', 'carol'])

    def test_unmatched_and_dangling_skipped(self):
        self.matches.create(Match(profiles=['alice', 'bob'], matched=False))
        self.matches.create(Match(profiles=['alice', 'ghost']))

        self.assertEqual(self.service.get_matches('alice').matched_users, [])

    def test_unknown_user(self):
        with self.assertRaises(UserNotFoundError):
            self.service.get_matches('nobody')

    def test_storage_failure(self):
        matches = Mock()
        matches.list_for_user.side_effect = RuntimeError("timeout")
        with self.assertRaises(StorageError):
            MatchService(matches, self.users).get_matches('alice')


if __name__ == '__main__':
    unittest.main()
