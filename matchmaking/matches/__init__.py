from matchmaking.matches.service import MatchService

__all__ = ['MatchService']
