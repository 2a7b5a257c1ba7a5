from sqlalchemy import Column, Text, Boolean, TIMESTAMP, ForeignKey, UniqueConstraint, Index, func

from .base import Base


class SwipeRecord(Base):
    """One directional interest signal. One row per ordered (user, prospect) pair."""
    __tablename__ = 'swipes'

    id = Column(Text, primary_key=True)
    user_id = Column(Text, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    prospect_id = Column(Text, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    interested = Column(Boolean, nullable=False, default=False)
    swipe_time = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint('user_id', 'prospect_id', name='uq_swipes_user_prospect'),
        Index('idx_swipes_prospect', 'prospect_id'),
    )
