#!/usr/bin/env python3
"""
Error taxonomy for the matchmaking core.

Repositories raise DuplicateFoundError for uniqueness conflicts and let any
other failure propagate. Services wrap unexpected storage failures in
StorageError so callers see one error kind per failure class.
"""


class MatchmakingError(Exception):
    """Base exception for matchmaking errors."""
    pass


class NotFoundError(MatchmakingError):
    """Raised when a requested entity does not exist."""
    pass


class ProspectNotFoundError(NotFoundError):
    """Raised when the swipe target does not exist."""
    pass


class UserNotFoundError(NotFoundError):
    """Raised when a user profile does not exist."""
    pass


class DuplicateFoundError(MatchmakingError):
    """Raised when a record violates a uniqueness rule."""
    pass


class DuplicateSwipeError(DuplicateFoundError):
    """Raised when the same (actor, prospect) swipe is recorded twice."""
    pass


class DuplicateProfileError(DuplicateFoundError):
    """Raised when a profile with the same email already exists."""
    pass


class DuplicateSubscriptionError(DuplicateFoundError):
    """Raised when a topic already has a registered handler."""
    pass


class InvalidInputError(MatchmakingError):
    """Raised when caller input violates bounded or enumerated constraints."""

    def __init__(self, message: str, errors=None):
        super().__init__(message)
        self.errors = errors or []


class InvalidFilterError(InvalidInputError):
    """Raised when a discovery filter fails validation."""
    pass


class InvalidPayloadError(InvalidInputError):
    """Raised when a swipe payload fails validation."""
    pass


class StorageError(MatchmakingError):
    """Wraps a repository failure with context."""
    pass


class MatchCreationFailedError(StorageError):
    """Raised when a match could not be created or recovered."""
    pass


class EventBusError(MatchmakingError):
    """Raised on event bus misuse."""
    pass


class EventBusClosedError(EventBusError):
    """Raised when publishing to a bus that has been stopped."""
    pass


class DispatchError(MatchmakingError):
    """Wraps a handler failure; logged by the bus, never raised to publishers."""

    def __init__(self, topic: str, cause: Exception):
        super().__init__(f"{topic} handler failed: {cause}")
        self.topic = topic
        self.cause = cause
