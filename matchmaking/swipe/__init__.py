from matchmaking.swipe.dto import SwipePayload, SwipeResponse
from matchmaking.swipe.service import SwipeService

__all__ = ['SwipePayload', 'SwipeResponse', 'SwipeService']
