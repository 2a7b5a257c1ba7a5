import logging
from typing import List, Optional, Sequence

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError

from database.models import MatchRecord
from database.repositories.base import BaseRepository
from matchmaking.exceptions import DuplicateFoundError
from matchmaking.interfaces import MatchStore
from matchmaking.models import Match
from matchmaking.utils import generate_id

logger = logging.getLogger(__name__)


def match_to_domain(record: MatchRecord) -> Match:
    return Match(id=record.id, profiles=[record.profile_a, record.profile_b], matched=record.matched)


class MatchRepository(BaseRepository, MatchStore):
    def create(self, match: Match) -> Match:
        profile_a, profile_b = match.pair_key()
        created = match.model_copy(update={'id': match.id or generate_id()})
        try:
            with self.session_scope() as session:
                session.add(MatchRecord(
                    id=created.id,
                    profile_a=profile_a,
                    profile_b=profile_b,
                    matched=created.matched,
                ))
                session.flush()
        except IntegrityError as e:
            raise DuplicateFoundError(f"match for {profile_a} and {profile_b} already exists") from e
        return created

    def get_by_profile_pair(self, profiles: Sequence[str]) -> Optional[Match]:
        profile_a, profile_b = sorted(profiles)
        with self.session_scope() as session:
            record = session.execute(
                select(MatchRecord).where(
                    MatchRecord.profile_a == profile_a,
                    MatchRecord.profile_b == profile_b,
                )
            ).scalar_one_or_none()
            return match_to_domain(record) if record else None

    def get_by_id(self, match_id: str) -> Optional[Match]:
        with self.session_scope() as session:
            record = session.get(MatchRecord, match_id)
            return match_to_domain(record) if record else None

    def list_for_user(self, user_id: str) -> List[Match]:
        with self.session_scope() as session:
            records = session.execute(
                select(MatchRecord)
                .where(or_(MatchRecord.profile_a == user_id, MatchRecord.profile_b == user_id))
                .order_by(MatchRecord.created_at, MatchRecord.id)
            ).scalars().all()
            return [match_to_domain(r) for r in records]

    def update(self, match: Match) -> Match:
        with self.session_scope() as session:
            record = session.get(MatchRecord, match.id)
            if record is None:
                logger.warning(f"Match {match.id} not found for update")
                return match
            record.matched = match.matched
        return match

    def delete(self, match_id: str) -> None:
        with self.session_scope() as session:
            record = session.get(MatchRecord, match_id)
            if record is not None:
                session.delete(record)
