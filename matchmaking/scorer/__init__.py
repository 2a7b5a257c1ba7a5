#!/usr/bin/env python3
"""
Scoring Module - swipe scoring over already-fetched profiles.

Public API:
- perform_swipe: score a candidate and return the updated swipe rating
- rank_candidates: order discovery results by composite score

- components.py: compatibility, proximity, attractiveness and swipe cost
- service.py: composite score, adaptive rating, perform_swipe, ranking
- models.py: SwipeOutcome, ScoredCandidate
"""

from matchmaking.scorer.components import (
    calculate_attractiveness_score,
    calculate_compatibility_score,
    calculate_proximity_score,
    calculate_swipe_cost,
    haversine_km,
)
from matchmaking.scorer.models import ScoredCandidate, SwipeOutcome
from matchmaking.scorer.service import (
    calculate_swipe_score,
    perform_swipe,
    rank_candidates,
    score_components,
    update_swipe_rating,
)

__all__ = [
    'calculate_attractiveness_score',
    'calculate_compatibility_score',
    'calculate_proximity_score',
    'calculate_swipe_cost',
    'calculate_swipe_score',
    'haversine_km',
    'perform_swipe',
    'rank_candidates',
    'score_components',
    'update_swipe_rating',
    'ScoredCandidate',
    'SwipeOutcome',
]
