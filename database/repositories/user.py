import logging
from typing import List, Optional, Sequence

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError

from database.models import UserRecord
from database.repositories.base import BaseRepository
from database.repositories.discovery import SqlDiscoveryCompiler
from matchmaking.discovery import PipelineExecutor, UserFilter, build_discovery_pipeline
from matchmaking.exceptions import DuplicateFoundError, UserNotFoundError
from matchmaking.interfaces import UserStore
from matchmaking.models import CandidateUser, User
from matchmaking.utils import generate_id

logger = logging.getLogger(__name__)

_ENUM_FIELDS = (
    'gender', 'ethnicity', 'pets', 'sexuality', 'religion',
    'drinking', 'smoking', 'drugs', 'dating_intentions',
)
_PLAIN_FIELDS = (
    'name', 'date_of_birth', 'height', 'kids', 'occupation', 'bio',
    'attractiveness', 'swipe_count', 'daily_swipe_budget', 'swiping_rate',
)


def user_to_domain(record: UserRecord) -> User:
    data = {field: getattr(record, field) for field in _ENUM_FIELDS + _PLAIN_FIELDS}
    data['id'] = record.id
    data['email'] = record.email or ''
    if record.latitude is not None and record.longitude is not None:
        data['location'] = [record.latitude, record.longitude]
    return User.model_validate(data)


def _apply_to_record(record: UserRecord, user: User) -> None:
    for field in _ENUM_FIELDS:
        value = getattr(user, field)
        setattr(record, field, value.value if value is not None else None)
    for field in _PLAIN_FIELDS:
        setattr(record, field, getattr(user, field))
    record.email = user.email or None
    if user.location:
        record.latitude, record.longitude = user.location
    else:
        record.latitude = record.longitude = None


class UserRepository(BaseRepository, UserStore):
    def __init__(self, session_factory, compiler: Optional[SqlDiscoveryCompiler] = None):
        super().__init__(session_factory)
        self.compiler = compiler or SqlDiscoveryCompiler()

    def get_by_id(self, user_id: str) -> Optional[User]:
        with self.session_scope() as session:
            record = session.execute(
                select(UserRecord).where(UserRecord.id == user_id)
            ).scalar_one_or_none()
            return user_to_domain(record) if record else None

    def get_by_email(self, email: str) -> Optional[User]:
        with self.session_scope() as session:
            record = session.execute(
                select(UserRecord).where(UserRecord.email == email.lower())
            ).scalar_one_or_none()
            return user_to_domain(record) if record else None

    def create(self, user: User) -> User:
        if user.email and self.get_by_email(user.email) is not None:
            raise DuplicateFoundError(f"profile with email {user.email} already exists")

        created = user.model_copy(update={'id': user.id or generate_id(), 'email': user.email.lower()})
        try:
            with self.session_scope() as session:
                record = UserRecord(id=created.id)
                _apply_to_record(record, created)
                session.add(record)
                session.flush()
        except IntegrityError as e:
            raise DuplicateFoundError(f"profile {created.id} already exists") from e
        return created

    def insert_many(self, users: Sequence[User]) -> List[User]:
        created = [u.model_copy(update={'id': u.id or generate_id(), 'email': u.email.lower()}) for u in users]
        with self.session_scope() as session:
            for user in created:
                record = UserRecord(id=user.id)
                _apply_to_record(record, user)
                session.add(record)
        logger.info(f"Inserted {len(created)} user(s)")
        return created

    def update(self, user: User) -> User:
        with self.session_scope() as session:
            record = session.execute(
                select(UserRecord).where(UserRecord.id == user.id)
            ).scalar_one_or_none()
            if record is None:
                raise UserNotFoundError(f"no user {user.id} to update")
            _apply_to_record(record, user)
        return user

    def count(self) -> int:
        with self.session_scope() as session:
            return session.execute(select(func.count()).select_from(UserRecord)).scalar_one()

    def discover(self, user_filter: UserFilter, viewer: User) -> List[CandidateUser]:
        stages = build_discovery_pipeline(viewer, user_filter)
        sql_stages, remaining = self.compiler.split(stages)
        stmt = self.compiler.compile(sql_stages)

        with self.session_scope() as session:
            rows = []
            for record, distance in session.execute(stmt).all():
                row = user_to_domain(record).model_dump()
                row[self.compiler.distance_field(sql_stages)] = distance
                rows.append(row)

        results = PipelineExecutor().run(remaining, rows)
        return [CandidateUser.model_validate(row) for row in results]
