from database.repositories.base import BaseRepository
from database.repositories.user import UserRepository
from database.repositories.swipe import SwipeRepository
from database.repositories.match import MatchRepository
from database.repositories.discovery import SqlDiscoveryCompiler
from database.repositories.memory import (
    InMemoryMatchRepository,
    InMemorySwipeRepository,
    InMemoryUserRepository,
)

__all__ = [
    'BaseRepository',
    'UserRepository',
    'SwipeRepository',
    'MatchRepository',
    'SqlDiscoveryCompiler',
    'InMemoryMatchRepository',
    'InMemorySwipeRepository',
    'InMemoryUserRepository',
]
