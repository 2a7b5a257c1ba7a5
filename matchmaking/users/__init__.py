from matchmaking.users.generator import generate_random_user
from matchmaking.users.service import UserService

__all__ = ['generate_random_user', 'UserService']
