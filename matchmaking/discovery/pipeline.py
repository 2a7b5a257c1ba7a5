#!/usr/bin/env python3
"""
Declarative discovery pipeline.

The pipeline is an ordered list of stage descriptors. Each stage narrows or
reshapes the candidate set produced by the previous one, so order matters.
Storage backends translate the list into their own execution plan; nothing
here knows about a query language.

Stages:
1. ProximityStage      - within max distance of the viewer, annotate distance (m), nearest first
2. SwipeLookupStage    - attach the viewer's swipes on each candidate
3. ExcludeSwipedStage  - drop swiped candidates and the viewer
4. ProjectionStage     - public fields, age from date_of_birth, distance in km
5. AgeRangeStage       - only when an age bound is set
6. AttributeStage      - only when height bounds or desired attributes are set
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from matchmaking.discovery.filters import UserFilter
from matchmaking.exceptions import InvalidFilterError
from matchmaking.models import CANDIDATE_FIELDS, User
from matchmaking.utils import utc_now

DISTANCE_FIELD = 'distance'
SWIPES_FIELD = 'swipes'
AGE_FIELD = 'age'


@dataclass(frozen=True)
class ProximityStage:
    origin: Tuple[float, float]
    max_distance_m: Optional[float] = None
    distance_field: str = DISTANCE_FIELD


@dataclass(frozen=True)
class SwipeLookupStage:
    viewer_id: str
    as_field: str = SWIPES_FIELD


@dataclass(frozen=True)
class ExcludeSwipedStage:
    viewer_id: str
    swipes_field: str = SWIPES_FIELD


@dataclass(frozen=True)
class ProjectionStage:
    fields: Tuple[str, ...]
    reference_time: datetime
    age_field: str = AGE_FIELD
    distance_field: str = DISTANCE_FIELD


@dataclass(frozen=True)
class AgeRangeStage:
    min_age: Optional[int] = None
    max_age: Optional[int] = None
    age_field: str = AGE_FIELD


@dataclass(frozen=True)
class AttributeStage:
    equals: Tuple[Tuple[str, str], ...] = ()
    min_height: Optional[int] = None
    max_height: Optional[int] = None


class DiscoveryQueryBuilder:
    """Builds the discovery stage list for one viewer and filter."""

    def __init__(self, viewer: User, user_filter: UserFilter, reference_time: Optional[datetime] = None):
        if not viewer.location:
            raise InvalidFilterError(f"Viewer {viewer.id} has no location to discover from")
        self.viewer = viewer
        self.user_filter = user_filter
        self.reference_time = reference_time or utc_now()

        max_distance_km = user_filter.max_distance_km
        self.stages: List[object] = [ProximityStage(
            origin=(viewer.location[0], viewer.location[1]),
            max_distance_m=max_distance_km * 1000 if max_distance_km else None,
        )]

    def lookup_swipes(self) -> 'DiscoveryQueryBuilder':
        self.stages.append(SwipeLookupStage(viewer_id=self.viewer.id))
        return self

    def exclude_swiped(self) -> 'DiscoveryQueryBuilder':
        self.stages.append(ExcludeSwipedStage(viewer_id=self.viewer.id))
        return self

    def projection(self) -> 'DiscoveryQueryBuilder':
        self.stages.append(ProjectionStage(fields=CANDIDATE_FIELDS, reference_time=self.reference_time))
        return self

    def age_filter(self, min_age: Optional[int], max_age: Optional[int]) -> 'DiscoveryQueryBuilder':
        if min_age is not None or max_age is not None:
            self.stages.append(AgeRangeStage(min_age=min_age, max_age=max_age))
        return self

    def attribute_filter(self) -> 'DiscoveryQueryBuilder':
        desired = self.user_filter.desired_attributes()
        if desired or self.user_filter.has_height_bounds():
            self.stages.append(AttributeStage(
                equals=tuple(sorted(desired.items())),
                min_height=self.user_filter.min_height,
                max_height=self.user_filter.max_height,
            ))
        return self

    def build(self) -> List[object]:
        return list(self.stages)


def build_discovery_pipeline(
    viewer: User,
    user_filter: UserFilter,
    reference_time: Optional[datetime] = None
) -> List[object]:
    """The full stage list for a validated filter."""
    return (
        DiscoveryQueryBuilder(viewer, user_filter, reference_time)
        .lookup_swipes()
        .exclude_swiped()
        .projection()
        .age_filter(user_filter.min_age, user_filter.max_age)
        .attribute_filter()
        .build()
    )
