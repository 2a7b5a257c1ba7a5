import random
import unittest
from unittest.mock import Mock

from database.repositories import InMemoryUserRepository
from matchmaking.config_loader import SeedConfig
from matchmaking.exceptions import (
    DuplicateFoundError,
    DuplicateProfileError,
    StorageError,
    UserNotFoundError,
)
from matchmaking.users import UserService, generate_random_user
from matchmaking.users.generator import NORTH_LONDON, random_date_of_birth
from matchmaking.utils import calculate_age
from tests.mocks.profiles import dob_for_age, make_user


class TestGenerator(unittest.TestCase):

    def test_profiles_within_bounds(self):
        rng = random.Random(7)
        for _ in range(50):
            user = generate_random_user(rng, daily_swipe_budget=25)
            lat, lon = user.location
            self.assertTrue(NORTH_LONDON['min_lat'] <= lat <= NORTH_LONDON['max_lat'])
            self.assertTrue(NORTH_LONDON['min_lon'] <= lon <= NORTH_LONDON['max_lon'])
            self.assertTrue(150 <= user.height <= 190)
            self.assertTrue(18 <= calculate_age(user.date_of_birth) <= 48)
            self.assertEqual(user.daily_swipe_budget, 25)
            self.assertIsNone(user.id)

    def test_date_of_birth_age_range(self):
        rng = random.Random(11)
        ages = {calculate_age(random_date_of_birth(rng)) for _ in range(500)}
        self.assertEqual(min(ages), 18)
        self.assertEqual(max(ages), 47)


class TestUserService(unittest.TestCase):

    def setUp(self):
        self.store = InMemoryUserRepository()
        self.service = UserService(self.store, SeedConfig(default_user_count=5), random.Random(3))

    def test_register_creates_profile(self):
        user = self.service.register()
        self.assertEqual(self.service.get_profile(user.id), user)

    def test_register_duplicate(self):
        store = Mock()
        store.create.side_effect = DuplicateFoundError("email taken")
        with self.assertRaises(DuplicateProfileError):
            UserService(store).register()

    def test_get_profile_missing(self):
        with self.assertRaises(UserNotFoundError):
            self.service.get_profile('nobody')

    def test_get_profile_storage_failure(self):
        store = Mock()
        store.get_by_id.side_effect = RuntimeError("gone")
        with self.assertRaises(StorageError):
            UserService(store).get_profile('u1')

    def test_seed_tops_up_to_target(self):
        self.store.create(make_user())
        self.store.create(make_user())

        self.assertEqual(self.service.seed_default_users(), 3)
        self.assertEqual(self.store.count(), 5)
        self.assertEqual(self.service.seed_default_users(), 0)

    def test_seed_explicit_target(self):
        self.assertEqual(self.service.seed_default_users(target_count=2), 2)

    def test_get_age(self):
        self.assertEqual(self.service.get_age(make_user(date_of_birth=dob_for_age(33))), 33)
        self.assertIsNone(self.service.get_age(make_user(date_of_birth=None)))


if __name__ == '__main__':
    unittest.main()
