"""
Trips app services layer.

Trips are the ledger source for settlements: members record expenses here
and the settlements app reads them back for balance calculation.
All state-changing operations use transactions.
"""

from .exceptions import (
    TripsServiceError,
    TripNotFoundError,
    ExpenseNotFoundError,
    AlreadyTripMemberError,
    NotTripMemberError,
    InvalidSplitError,
)

from .trip_management import (
    create_trip,
    get_trip_by_id,
    add_trip_member,
    update_rsvp,
)

from .expense_management import (
    create_expense,
    delete_expense,
    close_expense,
    reopen_expense,
)


__all__ = [
    # Exceptions
    'TripsServiceError',
    'TripNotFoundError',
    'ExpenseNotFoundError',
    'AlreadyTripMemberError',
    'NotTripMemberError',
    'InvalidSplitError',

    # Trip Management
    'create_trip',
    'get_trip_by_id',
    'add_trip_member',
    'update_rsvp',

    # Expense Management
    'create_expense',
    'delete_expense',
    'close_expense',
    'reopen_expense',
]
