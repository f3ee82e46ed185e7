"""
Balance service.

Thin adapter between the trip ledger and the pure calculator: fetches a
trip's active expenses with their assignments, maps them into calculator
records and returns the calculator's output untouched.
"""

import logging
from typing import Dict, List, Tuple
from uuid import UUID

from django.conf import settings

from apps.accounts.models import User
from apps.settlements import calculator
from apps.settlements.exceptions import TripNotFoundError
from apps.settlements.money import ZERO
from apps.trips.models import Expense, Trip


logger = logging.getLogger(__name__)


def to_expense_record(expense: Expense) -> calculator.ExpenseRecord:
    """Map an Expense (with prefetched assignments) into a calculator record."""
    return calculator.ExpenseRecord(
        id=expense.id,
        trip_id=expense.trip_id,
        payer_id=expense.paid_by_id,
        amount=expense.amount,
        currency=expense.currency,
        fx_rate=expense.fx_rate,
        normalized_amount=expense.normalized_amount,
        status=expense.status,
        date=expense.date,
        assignments=tuple(
            calculator.ShareAssignment(
                member_id=assignment.user_id,
                share_amount=assignment.share_amount,
                normalized_share_amount=assignment.normalized_share_amount,
                split_type=assignment.split_type,
                expense_id=assignment.expense_id,
            )
            for assignment in expense.assignments.all()
        ),
    )


def load_trip_ledger(trip_id: UUID) -> Tuple[Trip, List[calculator.ExpenseRecord]]:
    """
    Fetch a trip and its active expenses as calculator records.

    Expenses come back oldest first (date, then creation time), which fixes
    the order balances are listed in.

    Raises:
        TripNotFoundError: If trip doesn't exist or was deleted
    """
    try:
        trip = Trip.active.get(id=trip_id)
    except Trip.DoesNotExist:
        raise TripNotFoundError(f"Trip with ID {trip_id} not found")

    expenses = (
        Expense.active
        .filter(trip=trip)
        .prefetch_related('assignments')
        .order_by('date', 'created_at')
    )
    return trip, [to_expense_record(expense) for expense in expenses]


def calculate_trip_balances(trip_id: UUID) -> calculator.TripBalanceSummary:
    """
    Calculate per-member balances and the suggested settlement plan.

    Args:
        trip_id: UUID of the trip

    Returns:
        TripBalanceSummary with total spent, balances and transfers in the
        trip's base currency.

    Raises:
        TripNotFoundError: If trip doesn't exist or was deleted
    """
    trip, records = load_trip_ledger(trip_id)

    summary = calculator.summarize_trip(
        trip_id=trip.id,
        base_currency=trip.base_currency,
        expenses=records,
        epsilon=settings.SETTLEMENT_EPSILON,
    )

    logger.debug(
        "Trip %s: %d expenses, %d members with balances, %d transfers",
        trip.id, len(records), len(summary.balances), len(summary.settlements)
    )
    return summary


def calculate_user_balance(trip_id: UUID, user_id: UUID) -> Dict:
    """
    How much one member owes and is owed on a trip.

    For expenses the member paid, they are owed the total minus their own
    share. For expenses someone else paid, they owe their share.

    Returns:
        dict: {'user_owes': Decimal, 'user_is_owed': Decimal}
    """
    _, records = load_trip_ledger(trip_id)
    user_key = str(user_id)

    user_owes = ZERO
    user_is_owed = ZERO

    for record in records:
        own_share = sum(
            (a.normalized_share_amount for a in record.assignments if str(a.member_id) == user_key),
            ZERO
        )
        if str(record.payer_id) == user_key:
            user_is_owed += record.normalized_amount - own_share
        else:
            user_owes += own_share

    return {'user_owes': user_owes, 'user_is_owed': user_is_owed}


def get_member_directory(summary: calculator.TripBalanceSummary) -> Dict[UUID, User]:
    """Users referenced by a summary, keyed by id (for display names)."""
    member_ids = {balance.member_id for balance in summary.balances}
    return User.objects.in_bulk(list(member_ids))
