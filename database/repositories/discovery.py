#!/usr/bin/env python3
"""
Translates discovery stage descriptors into SQL.

The leading proximity / swipe-lookup / exclusion stages compile into one
SELECT: a haversine distance expression, a NOT EXISTS sub-select over the
viewer's swipes, and ORDER BY distance then insertion order. Later stages
run in-process on the fetched rows.
"""

import math
from typing import List, Sequence, Tuple

from sqlalchemy import Float, Select, exists, func, select

from database.models import SwipeRecord, UserRecord
from matchmaking.discovery.pipeline import (
    DISTANCE_FIELD,
    ExcludeSwipedStage,
    ProximityStage,
    SwipeLookupStage,
)

EARTH_RADIUS_M = 6371000.0


class SqlDiscoveryCompiler:
    SQL_STAGES = (ProximityStage, SwipeLookupStage, ExcludeSwipedStage)

    def __init__(self, earth_radius_m: float = EARTH_RADIUS_M):
        self.earth_radius_m = earth_radius_m

    def split(self, stages: Sequence[object]) -> Tuple[List[object], List[object]]:
        """Leading stages compiled to SQL, and the rest."""
        index = 0
        while index < len(stages) and isinstance(stages[index], self.SQL_STAGES):
            index += 1
        if not stages or not isinstance(stages[0], ProximityStage):
            raise ValueError("Discovery pipeline must start with a ProximityStage")
        return list(stages[:index]), list(stages[index:])

    def distance_field(self, sql_stages: Sequence[object]) -> str:
        for stage in sql_stages:
            if isinstance(stage, ProximityStage):
                return stage.distance_field
        return DISTANCE_FIELD

    def haversine_m(self, origin: Sequence[float]):
        """Distance in meters from origin to each user's location."""
        lat1 = math.radians(origin[0])
        lon1 = math.radians(origin[1])
        lat2 = func.radians(UserRecord.latitude, type_=Float)
        lon2 = func.radians(UserRecord.longitude, type_=Float)

        sin_dlat = func.sin((lat2 - lat1) / 2, type_=Float)
        sin_dlon = func.sin((lon2 - lon1) / 2, type_=Float)
        a = (
            func.power(sin_dlat, 2, type_=Float)
            + math.cos(lat1) * func.cos(lat2, type_=Float) * func.power(sin_dlon, 2, type_=Float)
        )
        return 2 * self.earth_radius_m * func.asin(func.sqrt(a, type_=Float), type_=Float)

    def compile(self, sql_stages: Sequence[object]) -> Select:
        distance = None
        conditions = []
        lookups = {}

        for stage in sql_stages:
            if isinstance(stage, ProximityStage):
                distance = self.haversine_m(stage.origin)
                conditions.append(UserRecord.latitude.isnot(None))
                conditions.append(UserRecord.longitude.isnot(None))
                if stage.max_distance_m is not None:
                    conditions.append(distance <= stage.max_distance_m)
            elif isinstance(stage, SwipeLookupStage):
                lookups[stage.as_field] = stage.viewer_id
            elif isinstance(stage, ExcludeSwipedStage):
                actor_id = lookups.pop(stage.swipes_field, stage.viewer_id)
                swiped = (
                    select(SwipeRecord.id)
                    .where(SwipeRecord.user_id == actor_id)
                    .where(SwipeRecord.prospect_id == UserRecord.id)
                )
                conditions.append(~exists(swiped))
                conditions.append(UserRecord.id != stage.viewer_id)

        if lookups:
            raise ValueError(f"Swipe lookups without an exclusion stage: {sorted(lookups)}")

        return (
            select(UserRecord, distance.label(DISTANCE_FIELD))
            .where(*conditions)
            .order_by(distance, UserRecord.pk)
        )
