"""
Storage and event contracts consumed by the matchmaking services.

One interface per storage role; concrete backends (SQLAlchemy, in-memory)
are chosen at startup. Implementations raise DuplicateFoundError for
uniqueness conflicts, return None for missing records, and let any other
failure propagate.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Sequence

from matchmaking.models import CandidateUser, Match, Swipe, User

if TYPE_CHECKING:
    from matchmaking.discovery.filters import UserFilter


class UserStore(ABC):

    @abstractmethod
    def get_by_id(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    def create(self, user: User) -> User:
        """Insert a profile, assigning its id. Duplicate email -> DuplicateFoundError."""
        pass

    @abstractmethod
    def insert_many(self, users: Sequence[User]) -> List[User]:
        pass

    @abstractmethod
    def update(self, user: User) -> User:
        pass

    @abstractmethod
    def count(self) -> int:
        pass

    @abstractmethod
    def discover(self, user_filter: "UserFilter", viewer: User) -> List[CandidateUser]:
        """Execute the discovery pipeline for a validated filter."""
        pass


class SwipeStore(ABC):

    @abstractmethod
    def create(self, swipe: Swipe) -> Swipe:
        """Insert a swipe. Existing (user_id, prospect_id) -> DuplicateFoundError."""
        pass

    @abstractmethod
    def get_by_actor_and_target(self, actor_id: str, target_id: str) -> Optional[Swipe]:
        pass

    @abstractmethod
    def get_by_id(self, swipe_id: str) -> Optional[Swipe]:
        pass

    @abstractmethod
    def update(self, swipe: Swipe) -> Swipe:
        pass

    @abstractmethod
    def delete(self, swipe_id: str) -> None:
        pass


class MatchStore(ABC):

    @abstractmethod
    def create(self, match: Match) -> Match:
        """Insert-if-absent on the unordered profile pair; conflict -> DuplicateFoundError."""
        pass

    @abstractmethod
    def get_by_profile_pair(self, profiles: Sequence[str]) -> Optional[Match]:
        """Match over the pair in either order."""
        pass

    @abstractmethod
    def get_by_id(self, match_id: str) -> Optional[Match]:
        pass

    @abstractmethod
    def list_for_user(self, user_id: str) -> List[Match]:
        pass

    @abstractmethod
    def update(self, match: Match) -> Match:
        pass

    @abstractmethod
    def delete(self, match_id: str) -> None:
        pass


class EventSink(ABC):

    @abstractmethod
    def publish(self, topic: str, data: Any = None) -> None:
        pass

    @abstractmethod
    def subscribe(self, topic: str, handler: Callable[..., Any]) -> None:
        pass
