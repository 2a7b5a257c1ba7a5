#!/usr/bin/env python3
"""
In-process execution of discovery stages.

Rows are plain dicts keyed by profile field. The memory backend runs every
stage here; the SQL backend compiles the leading stages into one SELECT and
hands the rows it fetched to this executor for the rest.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from matchmaking.discovery.pipeline import (
    AgeRangeStage,
    AttributeStage,
    ExcludeSwipedStage,
    ProjectionStage,
    ProximityStage,
    SwipeLookupStage,
)
from matchmaking.models import Swipe
from matchmaking.scorer.components import haversine_km
from matchmaking.utils import calculate_age

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
SwipeSource = Callable[[str], Iterable[Swipe]]


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class PipelineExecutor:
    """
    Applies stage descriptors to rows in order.

    Args:
        swipes_by_actor: Returns the swipes recorded by a given user. Only
            needed when the stages include a SwipeLookupStage.
    """

    def __init__(self, swipes_by_actor: Optional[SwipeSource] = None):
        self.swipes_by_actor = swipes_by_actor
        self._handlers = {
            ProximityStage: self._proximity,
            SwipeLookupStage: self._lookup_swipes,
            ExcludeSwipedStage: self._exclude_swiped,
            ProjectionStage: self._project,
            AgeRangeStage: self._age_range,
            AttributeStage: self._attributes,
        }

    def run(self, stages: Sequence[object], rows: Iterable[Row]) -> List[Row]:
        result = list(rows)
        for stage in stages:
            handler = self._handlers.get(type(stage))
            if handler is None:
                raise ValueError(f"Unsupported discovery stage: {type(stage).__name__}")
            result = handler(stage, result)
            logger.debug(f"{type(stage).__name__}: {len(result)} candidate(s)")
        return result

    def _proximity(self, stage: ProximityStage, rows: List[Row]) -> List[Row]:
        annotated = []
        for row in rows:
            location = row.get('location')
            if not location:
                # Profiles without a location cannot be placed
                continue
            distance_m = haversine_km(stage.origin, location) * 1000
            if stage.max_distance_m is not None and distance_m > stage.max_distance_m:
                continue
            annotated.append({**row, stage.distance_field: distance_m})
        # sort is stable: equal distances keep storage order
        annotated.sort(key=lambda r: r[stage.distance_field])
        return annotated

    def _lookup_swipes(self, stage: SwipeLookupStage, rows: List[Row]) -> List[Row]:
        if self.swipes_by_actor is None:
            raise ValueError("SwipeLookupStage requires a swipe source")
        by_prospect: Dict[str, List[Swipe]] = {}
        for swipe in self.swipes_by_actor(stage.viewer_id):
            by_prospect.setdefault(swipe.prospect_id, []).append(swipe)
        return [{**row, stage.as_field: by_prospect.get(row.get('id'), [])} for row in rows]

    def _exclude_swiped(self, stage: ExcludeSwipedStage, rows: List[Row]) -> List[Row]:
        return [
            row for row in rows
            if row.get('id') != stage.viewer_id and not row.get(stage.swipes_field)
        ]

    def _project(self, stage: ProjectionStage, rows: List[Row]) -> List[Row]:
        projected = []
        for row in rows:
            out = {field: row.get(field) for field in stage.fields if field in row}
            dob = row.get('date_of_birth')
            out[stage.age_field] = calculate_age(dob, stage.reference_time) if dob else None
            distance = row.get(stage.distance_field)
            out[stage.distance_field] = distance / 1000 if distance is not None else None
            projected.append(out)
        return projected

    def _age_range(self, stage: AgeRangeStage, rows: List[Row]) -> List[Row]:
        kept = []
        for row in rows:
            age = row.get(stage.age_field)
            if age is None:
                continue
            if stage.min_age is not None and age < stage.min_age:
                continue
            if stage.max_age is not None and age > stage.max_age:
                continue
            kept.append(row)
        return kept

    def _attributes(self, stage: AttributeStage, rows: List[Row]) -> List[Row]:
        kept = []
        for row in rows:
            if any(_plain(row.get(field)) != value for field, value in stage.equals):
                continue
            height = row.get('height')
            if stage.min_height is not None and (height is None or height < stage.min_height):
                continue
            if stage.max_height is not None and (height is None or height > stage.max_height):
                continue
            kept.append(row)
        return kept
