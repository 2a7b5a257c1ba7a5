#!/usr/bin/env python3
"""
Scoring Models - Data structures for scoring results.
"""

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class SwipeOutcome:
    """Result of scoring one candidate for a viewer."""
    score: float
    updated_rating: float
    compatibility: float = 0.0
    is_success: bool = False
    successes: int = 0
    failures: int = 0


@dataclass
class ScoredCandidate:
    """A discovery candidate with its composite swipe score."""
    candidate: Any
    score: float = 0.0
    compatibility: float = 0.0
    components: Dict[str, float] = field(default_factory=dict)
