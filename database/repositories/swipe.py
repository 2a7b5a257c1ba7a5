import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from database.models import SwipeRecord
from database.repositories.base import BaseRepository
from matchmaking.exceptions import DuplicateFoundError
from matchmaking.interfaces import SwipeStore
from matchmaking.models import Swipe
from matchmaking.utils import generate_id, utc_now

logger = logging.getLogger(__name__)


def swipe_to_domain(record: SwipeRecord) -> Swipe:
    return Swipe(
        id=record.id,
        user_id=record.user_id,
        prospect_id=record.prospect_id,
        interested=record.interested,
        swipe_time=record.swipe_time,
    )


class SwipeRepository(BaseRepository, SwipeStore):
    def create(self, swipe: Swipe) -> Swipe:
        created = swipe.model_copy(update={
            'id': swipe.id or generate_id(),
            'swipe_time': swipe.swipe_time or utc_now(),
        })
        try:
            with self.session_scope() as session:
                session.add(SwipeRecord(
                    id=created.id,
                    user_id=created.user_id,
                    prospect_id=created.prospect_id,
                    interested=created.interested,
                    swipe_time=created.swipe_time,
                ))
                session.flush()
        except IntegrityError as e:
            raise DuplicateFoundError(
                f"swipe {created.user_id} -> {created.prospect_id} already exists"
            ) from e
        return created

    def get_by_actor_and_target(self, actor_id: str, target_id: str) -> Optional[Swipe]:
        with self.session_scope() as session:
            record = session.execute(
                select(SwipeRecord).where(
                    SwipeRecord.user_id == actor_id,
                    SwipeRecord.prospect_id == target_id,
                )
            ).scalar_one_or_none()
            return swipe_to_domain(record) if record else None

    def get_by_id(self, swipe_id: str) -> Optional[Swipe]:
        with self.session_scope() as session:
            record = session.get(SwipeRecord, swipe_id)
            return swipe_to_domain(record) if record else None

    def list_by_actor(self, actor_id: str) -> List[Swipe]:
        with self.session_scope() as session:
            records = session.execute(
                select(SwipeRecord)
                .where(SwipeRecord.user_id == actor_id)
                .order_by(SwipeRecord.swipe_time)
            ).scalars().all()
            return [swipe_to_domain(r) for r in records]

    def update(self, swipe: Swipe) -> Swipe:
        with self.session_scope() as session:
            record = session.get(SwipeRecord, swipe.id)
            if record is None:
                logger.warning(f"Swipe {swipe.id} not found for update")
                return swipe
            record.interested = swipe.interested
            if swipe.swipe_time is not None:
                record.swipe_time = swipe.swipe_time
        return swipe

    def delete(self, swipe_id: str) -> None:
        with self.session_scope() as session:
            record = session.get(SwipeRecord, swipe_id)
            if record is not None:
                session.delete(record)
