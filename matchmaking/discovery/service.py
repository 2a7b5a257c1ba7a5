#!/usr/bin/env python3
"""
Discovery Service - surfaces candidates a viewer has not evaluated yet.

Validates the filter, then asks the user store to execute the discovery
pipeline. Scoring is an optional downstream step (discover_ranked).
"""

import logging
from typing import Any, List, Mapping, Optional, Union

from matchmaking.config_loader import DiscoveryConfig, ScorerConfig
from matchmaking.discovery.filters import UserFilter, validate_filter
from matchmaking.exceptions import InvalidFilterError, MatchmakingError, StorageError
from matchmaking.interfaces import UserStore
from matchmaking.models import CandidateUser, Preferences, User
from matchmaking.scorer import ScoredCandidate, rank_candidates

logger = logging.getLogger(__name__)


class DiscoveryService:
    """Discovery entry point consumed by the transport layer."""

    def __init__(
        self,
        user_store: UserStore,
        config: Optional[DiscoveryConfig] = None,
        scorer_config: Optional[ScorerConfig] = None
    ):
        self.user_store = user_store
        self.config = config or DiscoveryConfig()
        self.scorer_config = scorer_config

    def discover(
        self,
        viewer: User,
        user_filter: Union[UserFilter, Mapping[str, Any], None] = None
    ) -> List[CandidateUser]:
        """
        Candidates for the viewer, nearest first.

        Raises:
            InvalidFilterError: the filter is invalid or the viewer has no location
            StorageError: the user store failed
        """
        validated = validate_filter(user_filter)
        if validated.max_distance_km is None and self.config.default_max_distance:
            validated = validated.model_copy(update={'max_distance': self.config.default_max_distance})

        if not viewer.location:
            raise InvalidFilterError(f"Viewer {viewer.id} has no location to discover from")

        try:
            candidates = self.user_store.discover(validated, viewer)
        except MatchmakingError:
            raise
        except Exception as e:
            logger.error(f"Failed to discover profiles for {viewer.id}: {e}", exc_info=True)
            raise StorageError("failed to discover profiles") from e

        logger.info(f"Discovered {len(candidates or [])} candidate(s) for {viewer.id}")
        return list(candidates or [])

    def discover_ranked(
        self,
        viewer: User,
        preferences: Preferences,
        user_filter: Union[UserFilter, Mapping[str, Any], None] = None
    ) -> List[ScoredCandidate]:
        """Discovery results ordered by composite swipe score."""
        candidates = self.discover(viewer, user_filter)
        return rank_candidates(viewer, preferences, candidates, self.scorer_config)
