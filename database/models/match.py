from sqlalchemy import Column, Text, Boolean, TIMESTAMP, ForeignKey, UniqueConstraint, CheckConstraint, Index, func

from .base import Base


class MatchRecord(Base):
    """
    Mutual interest between two profiles.

    The pair is stored sorted (profile_a < profile_b) so the unique
    constraint covers both orders; concurrent creation for the same pair
    yields exactly one row.
    """
    __tablename__ = 'matches'

    id = Column(Text, primary_key=True)
    profile_a = Column(Text, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    profile_b = Column(Text, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    matched = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint('profile_a', 'profile_b', name='uq_matches_profile_pair'),
        CheckConstraint('profile_a < profile_b', name='ck_matches_profile_order'),
        Index('idx_matches_profile_b', 'profile_b'),
    )
