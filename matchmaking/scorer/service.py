#!/usr/bin/env python3
"""
Swipe Scoring - composite score, adaptive rating and candidate ranking.

Formula:
    component scores are scaled to [0, 2.5]:
        proximity      = 1 / (1 + km) * 2.5
        attractiveness = rating / 10 * 2.5
        swipe cost     = min(cost / 0.5 * 2.5, 2.5)
        compatibility  = compatibility * 2.5
    score = 0.25 * each component, summed, clamped to [0, 10]

Rating feedback:
    success_rate = successes / max(1, failures)
    > 0.8 -> rating * 0.8 (over-matching, dampen)
    < 0.2 -> rating * 1.2 (under-matching, boost)

No function here touches storage; callers persist the returned rating.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from matchmaking.config_loader import ScorerConfig
from matchmaking.models import Preferences
from matchmaking.scorer.components import (
    DEFAULT_SCORER_CONFIG,
    calculate_attractiveness_score,
    calculate_compatibility_score,
    calculate_proximity_score,
    calculate_swipe_cost,
)
from matchmaking.scorer.models import ScoredCandidate, SwipeOutcome

logger = logging.getLogger(__name__)


def score_components(
    viewer,
    candidate,
    compatibility_score: float,
    config: Optional[ScorerConfig] = None
) -> Dict[str, float]:
    """Component scores, each already scaled to [0, component_scale]."""
    config = config or DEFAULT_SCORER_CONFIG
    scale = config.component_scale

    proximity = calculate_proximity_score(viewer.location, candidate.location, config) * scale
    attractiveness = calculate_attractiveness_score(candidate) * scale
    swipe_cost = min(calculate_swipe_cost(viewer, config) / config.swipe_cost * scale, scale)
    compatibility = compatibility_score * scale

    return {
        'proximity': proximity,
        'attractiveness': attractiveness,
        'swipe_cost': swipe_cost,
        'compatibility': compatibility,
    }


def _combine(components: Dict[str, float], config: ScorerConfig) -> float:
    total = (
        components['proximity'] * config.proximity_weight
        + components['attractiveness'] * config.attractiveness_weight
        + components['swipe_cost'] * config.swipe_cost_weight
        + components['compatibility'] * config.compatibility_weight
    )
    return min(max(total, 0.0), config.max_score)


def calculate_swipe_score(
    viewer,
    candidate,
    compatibility_score: float,
    config: Optional[ScorerConfig] = None
) -> float:
    config = config or DEFAULT_SCORER_CONFIG
    return _combine(score_components(viewer, candidate, compatibility_score, config), config)


def update_swipe_rating(
    current_rating: float,
    successful_matches: int,
    unsuccessful_matches: int,
    config: Optional[ScorerConfig] = None
) -> float:
    config = config or DEFAULT_SCORER_CONFIG
    success_rate = float(successful_matches) / max(1, unsuccessful_matches)

    if success_rate > config.success_rate_high:
        return current_rating * config.dampen_factor
    if success_rate < config.success_rate_low:
        return current_rating * config.boost_factor
    return current_rating


def perform_swipe(
    viewer,
    viewer_preferences: Preferences,
    candidate,
    successful_matches: int,
    unsuccessful_matches: int,
    threshold: float,
    config: Optional[ScorerConfig] = None
) -> SwipeOutcome:
    """
    Score a candidate, classify it against threshold and recompute the rating.

    Args:
        viewer: Profile doing the swiping (location, swipe counters, rating)
        viewer_preferences: Viewer's preferences
        candidate: Profile being viewed
        successful_matches: Running success tally before this swipe
        unsuccessful_matches: Running failure tally before this swipe
        threshold: Score at or above which the swipe counts as a success

    Returns:
        SwipeOutcome with the score, the updated rating and the new tallies
    """
    config = config or DEFAULT_SCORER_CONFIG
    compatibility = calculate_compatibility_score(viewer_preferences, candidate, config)
    score = calculate_swipe_score(viewer, candidate, compatibility, config)

    is_success = score >= threshold
    if is_success:
        successful_matches += 1
    else:
        unsuccessful_matches += 1

    updated_rating = update_swipe_rating(
        viewer.swiping_rate, successful_matches, unsuccessful_matches, config
    )
    logger.debug(
        f"Scored candidate {getattr(candidate, 'id', None)} for {getattr(viewer, 'id', None)}: "
        f"score={score:.3f}, success={is_success}, rating {viewer.swiping_rate:.3f} -> {updated_rating:.3f}"
    )

    return SwipeOutcome(
        score=score,
        updated_rating=updated_rating,
        compatibility=compatibility,
        is_success=is_success,
        successes=successful_matches,
        failures=unsuccessful_matches,
    )


def rank_candidates(
    viewer,
    viewer_preferences: Preferences,
    candidates: Iterable,
    config: Optional[ScorerConfig] = None
) -> List[ScoredCandidate]:
    """Score discovery candidates, highest first; ties keep discovery order."""
    config = config or DEFAULT_SCORER_CONFIG
    scored: List[Tuple[int, ScoredCandidate]] = []

    for position, candidate in enumerate(candidates):
        compatibility = calculate_compatibility_score(viewer_preferences, candidate, config)
        components = score_components(viewer, candidate, compatibility, config)
        scored.append((position, ScoredCandidate(
            candidate=candidate,
            score=_combine(components, config),
            compatibility=compatibility,
            components=components,
        )))

    scored.sort(key=lambda item: (-item[1].score, item[0]))
    return [item for _, item in scored]
