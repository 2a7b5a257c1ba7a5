"""
Discovery Module - candidate selection for a viewer.

- filters.py: UserFilter and validation
- pipeline.py: declarative stage descriptors and the query builder
- executor.py: in-process stage execution
- service.py: DiscoveryService
"""

from matchmaking.discovery.filters import UserFilter, validate_filter
from matchmaking.discovery.pipeline import (
    AgeRangeStage,
    AttributeStage,
    DiscoveryQueryBuilder,
    ExcludeSwipedStage,
    ProjectionStage,
    ProximityStage,
    SwipeLookupStage,
    build_discovery_pipeline,
)
from matchmaking.discovery.executor import PipelineExecutor
from matchmaking.discovery.service import DiscoveryService

__all__ = [
    'UserFilter',
    'validate_filter',
    'AgeRangeStage',
    'AttributeStage',
    'DiscoveryQueryBuilder',
    'ExcludeSwipedStage',
    'ProjectionStage',
    'ProximityStage',
    'SwipeLookupStage',
    'build_discovery_pipeline',
    'PipelineExecutor',
    'DiscoveryService',
]
