"""
Domain-specific exceptions for trips app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class TripsServiceError(Exception):
    """Base exception for all trips service errors."""
    pass


class TripNotFoundError(TripsServiceError):
    """Raised when a trip does not exist or was deleted."""
    pass


class ExpenseNotFoundError(TripsServiceError):
    """Raised when an expense does not exist or was deleted."""
    pass


class AlreadyTripMemberError(TripsServiceError):
    """Raised when adding a user who is already on the trip."""
    pass


class NotTripMemberError(TripsServiceError):
    """Raised when a payer or assignee is not a member of the trip."""
    pass


class InvalidSplitError(TripsServiceError):
    """Raised when split input cannot produce share assignments."""
    pass
