import logging
import random
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine

from database.database import build_engine, build_session_factory
from database.init_db import init_db
from database.repositories import (
    InMemoryMatchRepository,
    InMemorySwipeRepository,
    InMemoryUserRepository,
    MatchRepository,
    SwipeRepository,
    UserRepository,
)
from matchmaking.config_loader import AppConfig
from matchmaking.discovery import DiscoveryService
from matchmaking.events import EventBus
from matchmaking.interfaces import MatchStore, SwipeStore, UserStore
from matchmaking.matches import MatchService
from matchmaking.swipe import SwipeService
from matchmaking.users import UserService
from notification.service import MatchNotificationService

logger = logging.getLogger(__name__)

MEMORY_BACKEND = "memory"


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    Stores are picked from config.database.url: "memory" selects the
    in-process backend, anything else is handed to SQLAlchemy. The event
    bus is created stopped; call start() once every subscriber is attached.
    """
    config: AppConfig
    user_store: UserStore
    swipe_store: SwipeStore
    match_store: MatchStore
    event_bus: EventBus
    user_service: UserService
    discovery_service: DiscoveryService
    swipe_service: SwipeService
    match_service: MatchService
    notification_service: Optional[MatchNotificationService] = None
    engine: Optional[Engine] = None

    @classmethod
    def build(cls, config: AppConfig, rng: Optional[random.Random] = None) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            rng: Random source for generated profiles

        Returns:
            Fully wired AppContext with the event bus not yet started
        """
        engine = None
        if config.database.url == MEMORY_BACKEND:
            swipe_store = InMemorySwipeRepository()
            user_store = InMemoryUserRepository(swipe_store)
            match_store = InMemoryMatchRepository()
            logger.info("Using in-memory storage")
        else:
            engine = build_engine(config.database.url, echo=config.database.echo)
            if config.database.create_tables:
                init_db(engine)
            session_factory = build_session_factory(engine)
            user_store = UserRepository(session_factory)
            swipe_store = SwipeRepository(session_factory)
            match_store = MatchRepository(session_factory)
            logger.info(f"Using SQL storage ({engine.dialect.name})")

        event_bus = EventBus(capacity=config.events.capacity)

        notification_service = None
        if config.notifications.enabled:
            notification_service = MatchNotificationService(
                config.notifications,
                name_lookup=lambda profile_id: cls._display_name(user_store, profile_id),
            )
            notification_service.register(event_bus)

        return cls(
            config=config,
            user_store=user_store,
            swipe_store=swipe_store,
            match_store=match_store,
            event_bus=event_bus,
            user_service=UserService(user_store, config.seed, rng),
            discovery_service=DiscoveryService(user_store, config.discovery, config.scorer),
            swipe_service=SwipeService(user_store, swipe_store, match_store, event_bus),
            match_service=MatchService(match_store, user_store),
            notification_service=notification_service,
            engine=engine,
        )

    @staticmethod
    def _display_name(user_store: UserStore, profile_id: str) -> Optional[str]:
        user = user_store.get_by_id(profile_id)
        return user.name if user else None

    def start(self) -> "AppContext":
        """Seed default profiles when configured, then start the event bus."""
        if self.config.seed.enabled:
            self.user_service.seed_default_users()
        self.event_bus.start()
        return self

    def close(self) -> None:
        """Drain pending events, then release the database engine."""
        self.event_bus.stop(self.config.events.shutdown_timeout_seconds)
        if self.engine is not None:
            self.engine.dispose()

    def __enter__(self) -> "AppContext":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
