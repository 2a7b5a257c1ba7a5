"""Match Service - a user's established matches."""
import logging

from matchmaking.exceptions import StorageError, UserNotFoundError
from matchmaking.interfaces import MatchStore, UserStore
from matchmaking.models import MatchedUserInfo

logger = logging.getLogger(__name__)


class MatchService:
    def __init__(self, match_store: MatchStore, user_store: UserStore):
        self.match_store = match_store
        self.user_store = user_store

    def get_matches(self, user_id: str) -> MatchedUserInfo:
        """The user's profile and every profile they are matched with."""
        try:
            current_user = self.user_store.get_by_id(user_id)
            if current_user is None:
                raise UserNotFoundError(f"user {user_id} not found")

            matched_users = []
            for match in self.match_store.list_for_user(user_id):
                if not match.matched:
                    continue
                other_id = next((p for p in match.profiles if p != user_id), None)
                other = self.user_store.get_by_id(other_id) if other_id else None
                if other is None:
                    logger.warning(f"Match {match.id} references missing profile {other_id}")
                    continue
                matched_users.append(other)
        except UserNotFoundError:
            raise
        except Exception as e:
            logger.error(f"Failed to get matches for {user_id}: {e}", exc_info=True)
            raise StorageError("failed to get matches") from e

        return MatchedUserInfo(current_user=current_user, matched_users=matched_users)
