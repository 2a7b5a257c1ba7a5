#!/usr/bin/env python3
"""
Score Components - the individual factors of the swipe score.

Each function is pure and works on already-fetched profiles:
- Compatibility: weighted drinking/smoking/religion agreement with dealbreakers
- Proximity: 1 / (1 + great-circle distance in km)
- Attractiveness: 0-10 rating scaled to [0, 1]
- Swipe cost: penalty for swiping past the daily budget
"""

import math
from typing import Optional, Sequence

from matchmaking.config_loader import ScorerConfig
from matchmaking.models import Preferences, Religion

DEFAULT_SCORER_CONFIG = ScorerConfig()


def haversine_km(
    origin: Sequence[float],
    target: Sequence[float],
    radius_km: float = DEFAULT_SCORER_CONFIG.earth_radius_km
) -> float:
    """Great-circle distance between two [latitude, longitude] points."""
    lat1, lon1 = math.radians(origin[0]), math.radians(origin[1])
    lat2, lon2 = math.radians(target[0]), math.radians(target[1])

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return radius_km * c


def calculate_compatibility_score(
    preferences: Preferences,
    candidate,
    config: Optional[ScorerConfig] = None
) -> float:
    """
    Weighted agreement between the viewer's preferences and a candidate.

    Returns a value in [0, 1], halved (by default) when a dealbreaker fails:
    a flagged drinking/smoking mismatch, or a viewer whose religion
    preference is "other" facing a candidate whose religion is not.
    """
    config = config or DEFAULT_SCORER_CONFIG
    score = 0.0
    total_weight = 0.0
    dealbreaker_failed = False

    if preferences.drinking.status == candidate.drinking:
        score += config.drinking_weight
    elif preferences.drinking.deal_breaker:
        dealbreaker_failed = True
    total_weight += config.drinking_weight

    if preferences.smoking.status == candidate.smoking:
        score += config.smoking_weight
    elif preferences.smoking.deal_breaker:
        dealbreaker_failed = True
    total_weight += config.smoking_weight

    if preferences.religion == candidate.religion:
        score += config.religion_weight
    elif preferences.religion == Religion.OTHER and candidate.religion != Religion.OTHER:
        dealbreaker_failed = True
    total_weight += config.religion_weight

    normalized = score / total_weight if total_weight else 0.0

    if dealbreaker_failed:
        return normalized * config.dealbreaker_factor
    return normalized


def calculate_proximity_score(
    viewer_location: Optional[Sequence[float]],
    candidate_location: Optional[Sequence[float]],
    config: Optional[ScorerConfig] = None
) -> float:
    """Bounded proximity in (0, 1]; 0 when either location is unknown."""
    config = config or DEFAULT_SCORER_CONFIG
    if not viewer_location or not candidate_location:
        return 0.0
    distance = haversine_km(viewer_location, candidate_location, config.earth_radius_km)
    return 1 / (1 + distance)


def calculate_attractiveness_score(candidate) -> float:
    """Attractiveness is rated out of 10."""
    return float(candidate.attractiveness or 0) / 10


def calculate_swipe_cost(user, config: Optional[ScorerConfig] = None) -> float:
    """Cost of the swipes made beyond the daily budget; 0 within budget."""
    config = config or DEFAULT_SCORER_CONFIG
    if user.swipe_count > user.daily_swipe_budget:
        return float(user.swipe_count - user.daily_swipe_budget) * config.swipe_cost
    return 0.0
