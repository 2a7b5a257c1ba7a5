#!/usr/bin/env python3
"""
Swipe Service - records swipes and turns mutual interest into matches.

Flow for swipe(user, {prospect_id, interested}):
1. The prospect must exist
2. Look up the prospect's swipe on the acting user (reciprocal direction)
3. Record the new swipe; an existing (user, prospect) swipe is a duplicate
4. Both directions interested -> reuse or create the match for the pair
5. Publish match.created for newly created matches

Two participants swiping at the same instant can both reach step 4. The
match store's insert-if-absent on the unordered pair picks one winner; the
loser re-reads the winner's match and reports it as its own result.
"""

import logging
from typing import Any, Mapping, Tuple, Union

from pydantic import ValidationError

from matchmaking.events import MATCH_CREATED
from matchmaking.exceptions import (
    DuplicateFoundError,
    DuplicateSwipeError,
    InvalidPayloadError,
    MatchCreationFailedError,
    ProspectNotFoundError,
    StorageError,
)
from matchmaking.interfaces import EventSink, MatchStore, SwipeStore, UserStore
from matchmaking.models import Match, Swipe
from matchmaking.swipe.dto import SwipePayload, SwipeResponse
from matchmaking.utils import generate_id, utc_now

logger = logging.getLogger(__name__)


class SwipeService:
    """
    Swipe/match engine.

    Errors are surfaced to the caller and never retried here; retry policy
    belongs to the transport layer.
    """

    def __init__(
        self,
        user_store: UserStore,
        swipe_store: SwipeStore,
        match_store: MatchStore,
        events: EventSink
    ):
        self.user_store = user_store
        self.swipe_store = swipe_store
        self.match_store = match_store
        self.events = events

    def swipe(
        self,
        user_id: str,
        payload: Union[SwipePayload, Mapping[str, Any]]
    ) -> SwipeResponse:
        """
        Record a swipe by user_id and report whether it completed a match.

        Raises:
            InvalidPayloadError: malformed payload or a swipe on oneself
            ProspectNotFoundError: the prospect does not exist
            DuplicateSwipeError: user_id already swiped on this prospect
            MatchCreationFailedError: mutual interest but no match could be stored
            StorageError: any other repository failure
        """
        payload = self._validate_payload(user_id, payload)
        prospect_id = payload.prospect_id

        try:
            prospect = self.user_store.get_by_id(prospect_id)
        except Exception as e:
            logger.error(f"Failed to get prospect user {prospect_id}: {e}", exc_info=True)
            raise StorageError("failed to get prospect user") from e
        if prospect is None:
            raise ProspectNotFoundError(f"prospect {prospect_id} not found")

        try:
            reciprocal = self.swipe_store.get_by_actor_and_target(prospect_id, user_id)
        except Exception as e:
            logger.error(f"Failed to check if {prospect_id} swiped {user_id}: {e}", exc_info=True)
            raise StorageError("failed to check if prospect swiped back") from e

        swipe = Swipe(
            id=generate_id(),
            user_id=user_id,
            prospect_id=prospect_id,
            interested=payload.interested,
            swipe_time=utc_now(),
        )
        try:
            swipe = self.swipe_store.create(swipe)
        except DuplicateFoundError as e:
            raise DuplicateSwipeError(f"{user_id} already swiped on {prospect_id}") from e
        except Exception as e:
            logger.error(f"Failed to create swipe {user_id} -> {prospect_id}: {e}", exc_info=True)
            raise StorageError("failed to create swipe") from e

        if reciprocal is None or not (reciprocal.interested and swipe.interested):
            return SwipeResponse(matched=False)

        match, created = self._get_or_create_match(user_id, prospect_id)
        if created:
            logger.info(f"Match {match.id} created for {user_id} and {prospect_id}")
            self._publish_match_created(match)

        return SwipeResponse(matched=True, match_id=match.id)

    def _validate_payload(
        self,
        user_id: str,
        payload: Union[SwipePayload, Mapping[str, Any]]
    ) -> SwipePayload:
        if not user_id:
            raise InvalidPayloadError("acting user id is required")
        try:
            if isinstance(payload, SwipePayload):
                payload = SwipePayload.model_validate(payload.model_dump())
            else:
                payload = SwipePayload.model_validate(dict(payload))
        except ValidationError as e:
            messages = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
            raise InvalidPayloadError(f"Invalid swipe payload: {'; '.join(messages)}", errors=messages) from e

        if payload.prospect_id == user_id:
            raise InvalidPayloadError("cannot swipe on your own profile")
        return payload

    def _get_or_create_match(self, user_id: str, prospect_id: str) -> Tuple[Match, bool]:
        """Returns (match, created)."""
        profiles = [user_id, prospect_id]

        try:
            existing = self.match_store.get_by_profile_pair(profiles)
        except Exception as e:
            logger.error(f"Failed to look up match for {profiles}: {e}", exc_info=True)
            raise MatchCreationFailedError("failed to create match") from e
        if existing is not None:
            logger.info(f"Match {existing.id} already exists for {user_id} and {prospect_id}")
            return existing, False

        match = Match(id=generate_id(), profiles=profiles, matched=True)
        try:
            return self.match_store.create(match), True
        except DuplicateFoundError:
            logger.info(f"Concurrent match creation for {profiles}; using the stored match")
        except Exception as e:
            logger.error(f"Failed to create match for {profiles}: {e}", exc_info=True)
            raise MatchCreationFailedError("failed to create match") from e

        try:
            existing = self.match_store.get_by_profile_pair(profiles)
        except Exception as e:
            raise MatchCreationFailedError("failed to read concurrently created match") from e
        if existing is None:
            raise MatchCreationFailedError(f"match for {profiles} reported as duplicate but not found")
        return existing, False

    def _publish_match_created(self, match: Match) -> None:
        try:
            self.events.publish(MATCH_CREATED, {
                'match_id': match.id,
                'profiles': list(match.profiles),
            })
        except Exception as e:
            logger.error(f"Failed to publish {MATCH_CREATED} for match {match.id}: {e}", exc_info=True)
