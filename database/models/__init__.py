from .base import Base
from .user import UserRecord
from .swipe import SwipeRecord
from .match import MatchRecord

__all__ = [
    'Base',
    'UserRecord',
    'SwipeRecord',
    'MatchRecord',
]
