#!/usr/bin/env python3
"""
User Service - profile registration, seeding and lookup.

Credentials and tokens are handled upstream; profiles here carry no secrets.
"""

import logging
import random
from typing import Optional

from matchmaking.config_loader import SeedConfig
from matchmaking.exceptions import (
    DuplicateFoundError,
    DuplicateProfileError,
    StorageError,
    UserNotFoundError,
)
from matchmaking.interfaces import UserStore
from matchmaking.models import User
from matchmaking.users.generator import generate_random_user
from matchmaking.utils import calculate_age

logger = logging.getLogger(__name__)


class UserService:
    def __init__(
        self,
        user_store: UserStore,
        config: Optional[SeedConfig] = None,
        rng: Optional[random.Random] = None
    ):
        self.user_store = user_store
        self.config = config or SeedConfig()
        self.rng = rng or random.Random()

    def register(self) -> User:
        """
        Create a random profile.

        Raises:
            DuplicateProfileError: a profile with the generated email exists
            StorageError: the user store failed
        """
        new_user = generate_random_user(self.rng, self.config.daily_swipe_budget)
        try:
            created = self.user_store.create(new_user)
        except DuplicateFoundError as e:
            raise DuplicateProfileError("sorry, account already exists") from e
        except Exception as e:
            logger.error(f"Failed to create user: {e}", exc_info=True)
            raise StorageError("sorry, failed to create profile") from e

        logger.info(f"Registered user {created.id} ({created.email})")
        return created

    def get_profile(self, user_id: str) -> User:
        try:
            profile = self.user_store.get_by_id(user_id)
        except Exception as e:
            logger.error(f"Failed to get user profile {user_id}: {e}", exc_info=True)
            raise StorageError("failed to get user profile") from e
        if profile is None:
            raise UserNotFoundError(f"sorry, account not found by id: {user_id}")
        return profile

    def get_age(self, user: User) -> Optional[int]:
        return calculate_age(user.date_of_birth) if user.date_of_birth else None

    def seed_default_users(self, target_count: Optional[int] = None) -> int:
        """
        Top the store up to target_count profiles.

        Returns:
            Number of profiles inserted
        """
        target = self.config.default_user_count if target_count is None else target_count
        try:
            current = self.user_store.count()
        except Exception as e:
            logger.error(f"Failed to get user count: {e}", exc_info=True)
            raise StorageError("failed to get user count") from e

        missing = target - current
        if missing <= 0:
            logger.info(f"User store already has {current} profile(s); nothing to seed")
            return 0

        users = [generate_random_user(self.rng, self.config.daily_swipe_budget) for _ in range(missing)]
        try:
            self.user_store.insert_many(users)
        except Exception as e:
            logger.error(f"Failed to insert default users: {e}", exc_info=True)
            raise StorageError("failed to insert default users") from e

        logger.info(f"Seeded {missing} default user(s)")
        return missing
