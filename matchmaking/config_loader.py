import yaml
import os
from typing import Optional
from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    # "memory" selects the in-process backend; anything else is a SQLAlchemy URL
    url: str = "memory"
    echo: bool = False
    create_tables: bool = True


class EventBusConfig(BaseModel):
    capacity: int = Field(default=10, ge=1)
    # Seconds to wait for queued events and running handlers on shutdown
    shutdown_timeout_seconds: Optional[float] = 10.0


class DiscoveryConfig(BaseModel):
    # Applied when a filter leaves max_distance unset (km); None = unbounded
    default_max_distance: Optional[int] = None


class ScorerConfig(BaseModel):
    """
    Weights and constants for the swipe scoring formula.

    Component scores are scaled to [0, component_scale] and combined with
    the component weights, then clamped to [0, max_score].
    """
    # Compatibility attribute weights
    drinking_weight: float = 0.3
    smoking_weight: float = 0.2
    religion_weight: float = 0.5
    dealbreaker_factor: float = 0.5

    # Composite weights
    proximity_weight: float = 0.25
    attractiveness_weight: float = 0.25
    swipe_cost_weight: float = 0.25
    compatibility_weight: float = 0.25

    component_scale: float = 2.5
    max_score: float = 10.0
    swipe_cost: float = 0.5
    earth_radius_km: float = 6371.0

    # Adaptive swipe rating
    success_rate_high: float = 0.8
    success_rate_low: float = 0.2
    dampen_factor: float = 0.8
    boost_factor: float = 1.2


class SeedConfig(BaseModel):
    """Random profiles inserted by AppContext.start() when enabled."""
    enabled: bool = False
    default_user_count: int = 100
    daily_swipe_budget: int = 100


class NotificationConfig(BaseModel):
    """
    Configuration for match notifications.

    The notification consumer subscribes to match-created events.
    """
    enabled: bool = False  # Disabled by default - must opt-in
    queue_name: str = "notifications"
    use_async_queue: bool = True  # Use Redis queue for async processing
    redis_url: Optional[str] = None  # Override default Redis URL


class AppConfig(BaseModel):
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    events: EventBusConfig = Field(default_factory=EventBusConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    scorer: ScorerConfig = Field(default_factory=ScorerConfig)
    seed: SeedConfig = Field(default_factory=SeedConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from root), try the project root
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    data = {}
    if os.path.exists(config_path):
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}

    # Allow env var override for DB URL
    env_db_url = os.environ.get("DATABASE_URL")
    if env_db_url:
        if data.get('database') is None:
            data['database'] = {}
        data['database']['url'] = env_db_url

    # Allow env var override for Redis URL
    env_redis_url = os.environ.get("REDIS_URL")
    if env_redis_url:
        if data.get('notifications') is None:
            data['notifications'] = {}
        data['notifications']['redis_url'] = env_redis_url

    # Allow env var override for event queue capacity
    env_capacity = os.environ.get("EVENT_QUEUE_CAPACITY")
    if env_capacity:
        if data.get('events') is None:
            data['events'] = {}
        data['events']['capacity'] = int(env_capacity)

    return AppConfig(**data)
