from sqlalchemy import Column, Text, Integer, Float, Date, TIMESTAMP, Index, func

from .base import Base


class UserRecord(Base):
    """
    Stored profile. pk is the natural insertion order used to break
    distance ties in discovery.
    """
    __tablename__ = 'users'

    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(Text, nullable=False, unique=True)
    name = Column(Text, nullable=False, default='')
    email = Column(Text, nullable=True, unique=True)
    gender = Column(Text)
    date_of_birth = Column(Date)

    # location as [latitude, longitude] in the domain model
    latitude = Column(Float)
    longitude = Column(Float)

    height = Column(Float)
    ethnicity = Column(Text)
    pets = Column(Text)
    sexuality = Column(Text)
    religion = Column(Text)
    drinking = Column(Text)
    smoking = Column(Text)
    drugs = Column(Text)
    dating_intentions = Column(Text)
    kids = Column(Integer, nullable=False, default=0)
    occupation = Column(Text)
    bio = Column(Text)

    # Scoring inputs
    attractiveness = Column(Integer, nullable=False, default=0)
    swipe_count = Column(Integer, nullable=False, default=0)
    daily_swipe_budget = Column(Integer, nullable=False, default=0)
    swiping_rate = Column(Float, nullable=False, default=1.0)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index('idx_users_location', 'latitude', 'longitude'),
        Index('idx_users_date_of_birth', 'date_of_birth'),
    )
