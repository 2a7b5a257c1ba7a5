#!/usr/bin/env python3
"""
SQL repository tests against in-memory SQLite.

Discovery runs through the compiled SELECT (haversine distance and the
NOT EXISTS swipe exclusion) and must agree with the in-memory backend.

Usage:
    python -m pytest tests/unit/database/test_sql_repositories.py -v
"""

import threading
from unittest.mock import Mock

import pytest

from database.database import uses_shared_connection
from database.repositories import (
    InMemorySwipeRepository,
    InMemoryUserRepository,
    MatchRepository,
    SqlDiscoveryCompiler,
    SwipeRepository,
    UserRepository,
)
from matchmaking.discovery import UserFilter, build_discovery_pipeline
from matchmaking.exceptions import DuplicateFoundError, UserNotFoundError
from matchmaking.models import Match, Pet, Swipe
from matchmaking.swipe import SwipeService
from tests.mocks.profiles import dob_for_age, make_user, offset_north


@pytest.fixture
def repos(sqlite_session_factory):
    return (
        UserRepository(sqlite_session_factory),
        SwipeRepository(sqlite_session_factory),
        MatchRepository(sqlite_session_factory),
    )


class TestUserRepository:

    def test_round_trip(self, repos):
        users, _, _ = repos
        original = make_user('u1', pets=Pet.CAT, bio="Hi")

        users.create(original)
        loaded = users.get_by_id('u1')

        assert loaded == original

    def test_email_lookup_case_insensitive(self, repos):
        users, _, _ = repos
        users.create(make_user('u1', email='Mixed@Example.com'))
        assert users.get_by_email('MIXED@example.com').id == 'u1'

    def test_duplicate_email(self, repos):
        users, _, _ = repos
        users.create(make_user(email='dup@example.com'))
        with pytest.raises(DuplicateFoundError):
            users.create(make_user(email='dup@example.com'))

    def test_blank_emails_stored_as_null(self, repos):
        users, _, _ = repos
        users.create(make_user(email=''))
        users.create(make_user(email=''))
        assert users.count() == 2

    def test_update_and_missing(self, repos):
        users, _, _ = repos
        user = users.create(make_user('u1', swiping_rate=1.0))

        users.update(user.model_copy(update={'swiping_rate': 0.8, 'location': None}))
        loaded = users.get_by_id('u1')
        assert loaded.swiping_rate == 0.8
        assert loaded.location is None

        with pytest.raises(UserNotFoundError):
            users.update(make_user('ghost'))


class TestSwipeRepository:

    def test_unique_per_ordered_pair(self, repos):
        users, swipes, _ = repos
        users.insert_many([make_user('a'), make_user('b')])

        swipes.create(Swipe(user_id='a', prospect_id='b', interested=True))
        swipes.create(Swipe(user_id='b', prospect_id='a', interested=True))
        with pytest.raises(DuplicateFoundError):
            swipes.create(Swipe(user_id='a', prospect_id='b', interested=False))

        assert [s.prospect_id for s in swipes.list_by_actor('a')] == ['b']

    def test_get_update_delete(self, repos):
        users, swipes, _ = repos
        users.insert_many([make_user('a'), make_user('b')])
        swipe = swipes.create(Swipe(user_id='a', prospect_id='b', interested=False))

        swipes.update(swipe.model_copy(update={'interested': True}))
        assert swipes.get_by_actor_and_target('a', 'b').interested is True

        swipes.delete(swipe.id)
        assert swipes.get_by_id(swipe.id) is None


class TestSharedConnectionConcurrency:

    def test_in_memory_sqlite_uses_shared_connection(self, sqlite_session_factory):
        assert uses_shared_connection(sqlite_session_factory)

    def test_concurrent_reciprocal_swipes(self, repos):
        users, swipes, matches = repos
        pairs = 30
        users.insert_many([make_user(f"l{n}") for n in range(pairs)] + [make_user(f"r{n}") for n in range(pairs)])
        service = SwipeService(users, swipes, matches, Mock())
        errors = []
        barrier = threading.Barrier(pairs * 2)

        def swipe(actor, prospect):
            barrier.wait(10)
            try:
                service.swipe(actor, {'prospect_id': prospect, 'interested': True})
            except Exception as e:
                errors.append(e)

        threads = []
        for n in range(pairs):
            threads.append(threading.Thread(target=swipe, args=(f"l{n}", f"r{n}")))
            threads.append(threading.Thread(target=swipe, args=(f"r{n}", f"l{n}")))
        for t in threads:
            t.start()
        for t in threads:
            t.join(30)

        assert errors == []
        for n in range(pairs):
            assert swipes.get_by_actor_and_target(f"l{n}", f"r{n}") is not None
            assert swipes.get_by_actor_and_target(f"r{n}", f"l{n}") is not None
            assert matches.get_by_profile_pair([f"l{n}", f"r{n}"]) is not None


class TestMatchRepository:

    def test_unordered_pair_unique(self, repos):
        users, _, matches = repos
        users.insert_many([make_user('a'), make_user('b'), make_user('c')])

        created = matches.create(Match(profiles=['b', 'a']))
        assert matches.get_by_profile_pair(['a', 'b']).id == created.id
        with pytest.raises(DuplicateFoundError):
            matches.create(Match(profiles=['a', 'b']))

        matches.create(Match(profiles=['c', 'a']))
        assert len(matches.list_for_user('a')) == 2
        assert len(matches.list_for_user('b')) == 1

    def test_update_delete(self, repos):
        users, _, matches = repos
        users.insert_many([make_user('a'), make_user('b')])
        match = matches.create(Match(profiles=['a', 'b']))

        matches.update(match.model_copy(update={'matched': False}))
        assert matches.get_by_id(match.id).matched is False

        matches.delete(match.id)
        assert matches.get_by_profile_pair(['a', 'b']) is None


def _populate(users, swipes):
    viewer = users.create(make_user('viewer'))
    profiles = [
        make_user('far', location=offset_north(6), date_of_birth=dob_for_age(30)),
        make_user('near', location=offset_north(0.5), date_of_birth=dob_for_age(20)),
        make_user('mid', location=offset_north(2), date_of_birth=dob_for_age(30), pets=Pet.DOG),
        make_user('swiped', location=offset_north(1), date_of_birth=dob_for_age(30)),
        make_user('old', location=offset_north(3), date_of_birth=dob_for_age(40)),
        make_user('nowhere', location=None),
    ]
    users.insert_many(profiles)
    swipes.create(Swipe(user_id='viewer', prospect_id='swiped', interested=False))
    swipes.create(Swipe(user_id='far', prospect_id='viewer', interested=True))
    return viewer


class TestSqlDiscovery:

    def test_nearest_first_excluding_viewer_and_swiped(self, repos):
        users, swipes, _ = repos
        viewer = _populate(users, swipes)

        results = users.discover(UserFilter(), viewer)

        assert [c.id for c in results] == ['near', 'mid', 'old', 'far']
        assert results[0].distance == pytest.approx(0.5, abs=0.01)

    def test_distance_and_age_filters(self, repos):
        users, swipes, _ = repos
        viewer = _populate(users, swipes)

        results = users.discover(UserFilter(max_distance=5, min_age=25, max_age=35), viewer)

        assert [c.id for c in results] == ['mid']
        assert results[0].age == 30

    def test_attribute_filter(self, repos):
        users, swipes, _ = repos
        viewer = _populate(users, swipes)

        results = users.discover(UserFilter(desired_pets='dog'), viewer)

        assert [c.id for c in results] == ['mid']

    @pytest.mark.parametrize('user_filter', [
        UserFilter(),
        UserFilter(max_distance=4),
        UserFilter(min_age=25),
        UserFilter(max_age=25, max_distance=10),
    ])
    def test_agrees_with_memory_backend(self, repos, user_filter):
        users, swipes, _ = repos
        viewer = _populate(users, swipes)

        memory_swipes = InMemorySwipeRepository()
        memory_users = InMemoryUserRepository(memory_swipes)
        _populate(memory_users, memory_swipes)

        sql_ids = [c.id for c in users.discover(user_filter, viewer)]
        memory_ids = [c.id for c in memory_users.discover(user_filter, viewer)]
        assert sql_ids == memory_ids


class TestSqlDiscoveryCompiler:

    def test_split_at_first_in_process_stage(self):
        stages = build_discovery_pipeline(make_user('viewer'), UserFilter(min_age=20))
        compiler = SqlDiscoveryCompiler()

        sql_stages, remaining = compiler.split(stages)

        assert len(sql_stages) == 3
        assert [type(s).__name__ for s in remaining] == ['ProjectionStage', 'AgeRangeStage']

    def test_requires_leading_proximity(self):
        stages = build_discovery_pipeline(make_user('viewer'), UserFilter())
        with pytest.raises(ValueError):
            SqlDiscoveryCompiler().split(stages[1:])

    def test_lookup_without_exclusion_rejected(self):
        stages = build_discovery_pipeline(make_user('viewer'), UserFilter())
        with pytest.raises(ValueError):
            SqlDiscoveryCompiler().compile(stages[:2])
