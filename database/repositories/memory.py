#!/usr/bin/env python3
"""
In-memory stores.

Used when no database URL is configured and by the unit tests. Each store
guards its state with a lock and hands out copies, so callers never share
mutable records with the store. Iteration follows insertion order, which
is the tie-break discovery relies on.
"""

import logging
import threading
from typing import Dict, List, Optional, Sequence, Tuple

from matchmaking.discovery import PipelineExecutor, UserFilter, build_discovery_pipeline
from matchmaking.exceptions import DuplicateFoundError, UserNotFoundError
from matchmaking.interfaces import MatchStore, SwipeStore, UserStore
from matchmaking.models import CandidateUser, Match, Swipe, User
from matchmaking.utils import generate_id, utc_now

logger = logging.getLogger(__name__)


class InMemorySwipeRepository(SwipeStore):
    def __init__(self):
        self._lock = threading.Lock()
        self._swipes: Dict[str, Swipe] = {}
        self._by_pair: Dict[Tuple[str, str], str] = {}

    def create(self, swipe: Swipe) -> Swipe:
        key = (swipe.user_id, swipe.prospect_id)
        with self._lock:
            if key in self._by_pair:
                raise DuplicateFoundError(f"swipe {key[0]} -> {key[1]} already exists")
            created = swipe.model_copy(update={
                'id': swipe.id or generate_id(),
                'swipe_time': swipe.swipe_time or utc_now(),
            })
            self._swipes[created.id] = created
            self._by_pair[key] = created.id
            return created.model_copy()

    def get_by_actor_and_target(self, actor_id: str, target_id: str) -> Optional[Swipe]:
        with self._lock:
            swipe_id = self._by_pair.get((actor_id, target_id))
            return self._swipes[swipe_id].model_copy() if swipe_id else None

    def get_by_id(self, swipe_id: str) -> Optional[Swipe]:
        with self._lock:
            swipe = self._swipes.get(swipe_id)
            return swipe.model_copy() if swipe else None

    def list_by_actor(self, actor_id: str) -> List[Swipe]:
        with self._lock:
            return [s.model_copy() for s in self._swipes.values() if s.user_id == actor_id]

    def update(self, swipe: Swipe) -> Swipe:
        with self._lock:
            if swipe.id in self._swipes:
                self._swipes[swipe.id] = swipe.model_copy()
        return swipe

    def delete(self, swipe_id: str) -> None:
        with self._lock:
            swipe = self._swipes.pop(swipe_id, None)
            if swipe is not None:
                self._by_pair.pop((swipe.user_id, swipe.prospect_id), None)


class InMemoryMatchRepository(MatchStore):
    def __init__(self):
        self._lock = threading.Lock()
        self._matches: Dict[str, Match] = {}
        self._by_pair: Dict[Tuple[str, str], str] = {}

    def create(self, match: Match) -> Match:
        key = match.pair_key()
        with self._lock:
            if key in self._by_pair:
                raise DuplicateFoundError(f"match for {key[0]} and {key[1]} already exists")
            created = match.model_copy(update={'id': match.id or generate_id()}, deep=True)
            self._matches[created.id] = created
            self._by_pair[key] = created.id
            return created.model_copy(deep=True)

    def get_by_profile_pair(self, profiles: Sequence[str]) -> Optional[Match]:
        key = tuple(sorted(profiles))
        with self._lock:
            match_id = self._by_pair.get(key)
            return self._matches[match_id].model_copy(deep=True) if match_id else None

    def get_by_id(self, match_id: str) -> Optional[Match]:
        with self._lock:
            match = self._matches.get(match_id)
            return match.model_copy(deep=True) if match else None

    def list_for_user(self, user_id: str) -> List[Match]:
        with self._lock:
            return [m.model_copy(deep=True) for m in self._matches.values() if user_id in m.profiles]

    def update(self, match: Match) -> Match:
        with self._lock:
            if match.id in self._matches:
                self._matches[match.id] = match.model_copy(deep=True)
        return match

    def delete(self, match_id: str) -> None:
        with self._lock:
            match = self._matches.pop(match_id, None)
            if match is not None:
                self._by_pair.pop(match.pair_key(), None)


class InMemoryUserRepository(UserStore):
    """
    Profiles kept in insertion order. Discovery runs the whole stage list
    through PipelineExecutor, reading swipes from the given swipe store.
    """

    def __init__(self, swipe_store: Optional[InMemorySwipeRepository] = None):
        self._lock = threading.Lock()
        self._users: Dict[str, User] = {}
        self.swipe_store = swipe_store or InMemorySwipeRepository()

    def _email_taken(self, email: str) -> bool:
        return bool(email) and any(u.email == email for u in self._users.values())

    def _prepare(self, user: User) -> User:
        created = user.model_copy(update={'id': user.id or generate_id(), 'email': user.email.lower()}, deep=True)
        if created.id in self._users:
            raise DuplicateFoundError(f"profile {created.id} already exists")
        if self._email_taken(created.email):
            raise DuplicateFoundError(f"profile with email {created.email} already exists")
        return created

    def _insert(self, user: User) -> User:
        created = self._prepare(user)
        self._users[created.id] = created
        return created.model_copy(deep=True)

    def get_by_id(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy(deep=True) if user else None

    def get_by_email(self, email: str) -> Optional[User]:
        email = email.lower()
        with self._lock:
            for user in self._users.values():
                if user.email and user.email == email:
                    return user.model_copy(deep=True)
        return None

    def create(self, user: User) -> User:
        with self._lock:
            return self._insert(user)

    def insert_many(self, users: Sequence[User]) -> List[User]:
        # All or nothing: nothing is stored unless the whole batch is valid
        with self._lock:
            prepared = [self._prepare(u) for u in users]
            ids = [u.id for u in prepared]
            if len(set(ids)) != len(ids):
                raise DuplicateFoundError("batch repeats a profile id")
            emails = [u.email for u in prepared if u.email]
            if len(set(emails)) != len(emails):
                raise DuplicateFoundError("batch repeats a profile email")
            for user in prepared:
                self._users[user.id] = user
            created = [u.model_copy(deep=True) for u in prepared]
        logger.info(f"Inserted {len(created)} user(s)")
        return created

    def update(self, user: User) -> User:
        with self._lock:
            if user.id not in self._users:
                raise UserNotFoundError(f"no user {user.id} to update")
            self._users[user.id] = user.model_copy(deep=True)
        return user

    def count(self) -> int:
        with self._lock:
            return len(self._users)

    def discover(self, user_filter: UserFilter, viewer: User) -> List[CandidateUser]:
        stages = build_discovery_pipeline(viewer, user_filter)
        with self._lock:
            rows = [u.model_dump() for u in self._users.values()]
        executor = PipelineExecutor(swipes_by_actor=self.swipe_store.list_by_actor)
        return [CandidateUser.model_validate(row) for row in executor.run(stages, rows)]
