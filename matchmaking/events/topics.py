"""Event topics published by the matchmaking services."""

MATCH_CREATED = "match.created"
