"""
Expense management service.

Records expenses together with their share assignments. An expense and its
assignments are always written in one transaction so the ledger never holds
an expense without its split.
"""

import logging
from datetime import date as date_type
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.settlements.money import (
    normalize_amount,
    round_money,
    split_by_percentages,
    split_evenly,
    to_decimal,
)
from apps.trips.models import (
    Expense,
    ExpenseStatus,
    ShareAssignment,
    SplitType,
    Trip,
    TripMember,
)

from .exceptions import (
    TripNotFoundError,
    ExpenseNotFoundError,
    NotTripMemberError,
    InvalidSplitError,
)


logger = logging.getLogger(__name__)


@transaction.atomic
def create_expense(
    *,
    trip_id: UUID,
    paid_by: User,
    amount,
    date: date_type,
    currency: Optional[str] = None,
    fx_rate=Decimal('1'),
    description: str = '',
    split_type: str = SplitType.EQUAL,
    split_members: Optional[List[UUID]] = None,
    custom_shares: Optional[Dict[UUID, Decimal]] = None,
    percentages: Optional[Dict[UUID, Decimal]] = None,
) -> Tuple[Expense, List[ShareAssignment]]:
    """
    Record an expense and split it among trip members.

    Split types:
        - equal: ``split_evenly`` across ``split_members`` (all trip
          members when omitted). The first members in join order absorb
          the leftover cents.
        - custom: ``custom_shares`` maps user IDs to amounts in the expense
          currency. Amounts are stored as given; they may add up to more or
          less than the expense.
        - percentage: ``percentages`` maps user IDs to percent weights.

    Args:
        trip_id: UUID of the trip
        paid_by: Member who paid
        amount: Amount in the expense currency
        date: Date of the expense
        currency: ISO 4217 code (defaults to the trip's base currency)
        fx_rate: Fixed rate into the base currency, captured now
        description: Optional note
        split_type: One of SplitType
        split_members: User IDs for an equal split
        custom_shares: {user_id: amount} for a custom split
        percentages: {user_id: percent} for a percentage split

    Returns:
        tuple: (Expense, list[ShareAssignment])

    Raises:
        TripNotFoundError: If the trip doesn't exist
        NotTripMemberError: If payer or an assignee is not on the trip
        InvalidSplitError: If the split input is empty or inconsistent
    """
    try:
        trip = Trip.active.get(id=trip_id)
    except Trip.DoesNotExist:
        raise TripNotFoundError(f"Trip with ID {trip_id} not found")

    fx_rate = to_decimal(fx_rate)
    if fx_rate <= 0:
        raise InvalidSplitError("Exchange rate must be positive")

    amount = round_money(amount)
    if amount < 0:
        raise InvalidSplitError("Expense amount cannot be negative")

    members = {
        str(m.user_id): m.user
        for m in TripMember.objects.filter(trip=trip).select_related('user')
    }
    if str(paid_by.id) not in members:
        raise NotTripMemberError("Payer is not a member of this trip")

    shares = _build_shares(
        amount=amount,
        normalized_amount=normalize_amount(amount, fx_rate),
        fx_rate=fx_rate,
        members=members,
        split_type=split_type,
        split_members=split_members,
        custom_shares=custom_shares,
        percentages=percentages,
    )

    expense = Expense.objects.create(
        trip=trip,
        paid_by=paid_by,
        description=description,
        amount=amount,
        currency=(currency or trip.base_currency).upper(),
        fx_rate=fx_rate,
        date=date,
    )

    assignments = []
    for user, share_amount, normalized_share_amount in shares:
        assignments.append(ShareAssignment.objects.create(
            expense=expense,
            user=user,
            share_amount=share_amount,
            normalized_share_amount=normalized_share_amount,
            split_type=split_type,
        ))

    logger.info(
        "Expense %s recorded on trip %s: %s %s split %s ways (%s)",
        expense.id, trip.id, expense.amount, expense.currency,
        len(assignments), split_type
    )
    return expense, assignments


def _build_shares(*, amount, normalized_amount, fx_rate, members, split_type,
                  split_members, custom_shares, percentages):
    """
    Return [(User, share, normalized_share)].

    Equal and percentage splits divide the normalized total with the same
    helper and member order as the expense amount, so normalized shares add
    up to the expense's normalized amount to the cent.
    """

    def resolve(user_ids):
        users = []
        for user_id in user_ids:
            user = members.get(str(user_id))
            if user is None:
                raise NotTripMemberError(f"User {user_id} is not a member of this trip")
            users.append(user)
        return users

    if split_type == SplitType.EQUAL:
        if split_members:
            participants = resolve(split_members)
        else:
            participants = list(members.values())
        if not participants:
            raise InvalidSplitError("No participants found for split")
        return list(zip(
            participants,
            split_evenly(amount, len(participants)),
            split_evenly(normalized_amount, len(participants)),
        ))

    if split_type == SplitType.CUSTOM:
        if not custom_shares:
            raise InvalidSplitError("Custom split requires share amounts")
        participants = resolve(custom_shares.keys())
        amounts = [round_money(value) for value in custom_shares.values()]
        if any(value < 0 for value in amounts):
            raise InvalidSplitError("Share amounts cannot be negative")
        return [
            (user, value, normalize_amount(value, fx_rate))
            for user, value in zip(participants, amounts)
        ]

    if split_type == SplitType.PERCENTAGE:
        if not percentages:
            raise InvalidSplitError("Percentage split requires percentages")
        participants = resolve(percentages.keys())
        weights = [to_decimal(value) for value in percentages.values()]
        if any(value < 0 for value in weights):
            raise InvalidSplitError("Percentages cannot be negative")
        return list(zip(
            participants,
            split_by_percentages(amount, weights),
            split_by_percentages(normalized_amount, weights),
        ))

    raise InvalidSplitError(f"Unknown split type: {split_type}")


def _get_expense_for_update(expense_id):
    try:
        return Expense.active.select_for_update().get(id=expense_id)
    except Expense.DoesNotExist:
        raise ExpenseNotFoundError(f"Expense with ID {expense_id} not found")


@transaction.atomic
def delete_expense(*, expense_id: UUID) -> Expense:
    """
    Soft-delete an expense; it drops out of every balance calculation.

    Raises:
        ExpenseNotFoundError: If the expense doesn't exist or is already deleted
    """
    expense = _get_expense_for_update(expense_id)
    expense.soft_delete()
    logger.info("Expense %s deleted from trip %s", expense.id, expense.trip_id)
    return expense


@transaction.atomic
def close_expense(*, expense_id: UUID) -> Expense:
    """Finalize an expense so its split is no longer edited."""
    expense = _get_expense_for_update(expense_id)
    expense.status = ExpenseStatus.CLOSED
    expense.save(update_fields=['status', 'updated_at'])
    return expense


@transaction.atomic
def reopen_expense(*, expense_id: UUID) -> Expense:
    """Reopen a finalized expense."""
    expense = _get_expense_for_update(expense_id)
    expense.status = ExpenseStatus.OPEN
    expense.save(update_fields=['status', 'updated_at'])
    return expense
