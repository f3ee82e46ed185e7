"""
Settlement persistence service.

Turns a calculated plan into Settlement rows and tracks real-world payments
against them. Payment recording locks the settlement row so concurrent
payments cannot double-count.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Tuple
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.settlements.exceptions import (
    TripNotFoundError,
    SettlementNotFoundError,
    PaymentNotFoundError,
    SettlementAlreadyPaidError,
    PaymentExceedsSettlementError,
)
from apps.settlements.models import Settlement, SettlementStatus, Payment
from apps.settlements.money import ZERO, round_money
from apps.trips.models import Trip

from .balances import calculate_trip_balances


logger = logging.getLogger(__name__)


def settlement_status_for(amount: Decimal, total_paid: Decimal) -> str:
    """
    Status implied by how much has been paid.

    Paid once no more than epsilon remains, partially paid after any
    payment, pending otherwise.
    """
    if amount - total_paid <= settings.SETTLEMENT_EPSILON:
        return SettlementStatus.PAID
    if total_paid > ZERO:
        return SettlementStatus.PARTIALLY_PAID
    return SettlementStatus.PENDING


@transaction.atomic
def persist_settlement_plan(*, trip_id: UUID, created_by: User) -> List[Settlement]:
    """
    Replace a trip's pending settlements with the current suggested plan.

    Settlements that already have payments (partially paid, paid, verified)
    are kept; only untouched pending ones are replaced.

    The plan is computed from expense balances alone. Recorded payments do
    not reduce those balances, so the debt behind a kept partially paid
    settlement is planned again in full next to it.

    Args:
        trip_id: UUID of the trip
        created_by: User requesting the plan

    Returns:
        list[Settlement]: The newly created pending settlements

    Raises:
        TripNotFoundError: If trip doesn't exist or was deleted
    """
    # Lock the trip so two planners can't interleave delete/create
    try:
        trip = Trip.active.select_for_update().get(id=trip_id)
    except Trip.DoesNotExist:
        raise TripNotFoundError(f"Trip with ID {trip_id} not found")

    summary = calculate_trip_balances(trip.id)

    Settlement.objects.filter(
        trip=trip,
        status=SettlementStatus.PENDING,
        deleted_at__isnull=True,
    ).delete()

    created = []
    for transfer in summary.settlements:
        notes = ''
        if transfer.oldest_debt_date:
            notes = f"Debt since {transfer.oldest_debt_date.isoformat()}"

        created.append(Settlement.objects.create(
            trip=trip,
            from_user_id=transfer.from_member,
            to_user_id=transfer.to_member,
            amount=transfer.amount,
            status=SettlementStatus.PENDING,
            notes=notes,
        ))

    logger.info(
        "Persisted %d settlements for trip %s (requested by %s)",
        len(created), trip.id, created_by.id
    )
    return created


def get_trip_settlements(*, trip_id: UUID) -> QuerySet:
    """Active settlements of a trip with users and payments prefetched."""
    return (
        Settlement.objects
        .filter(trip_id=trip_id, deleted_at__isnull=True)
        .select_related('from_user', 'to_user')
        .prefetch_related('payments__recorded_by')
        .order_by('status', '-created_at')
    )


def get_settlement(*, settlement_id: UUID) -> Settlement:
    """
    Raises:
        SettlementNotFoundError: If settlement doesn't exist or was deleted
    """
    try:
        return (
            Settlement.objects
            .select_related('trip')
            .get(id=settlement_id, deleted_at__isnull=True)
        )
    except Settlement.DoesNotExist:
        raise SettlementNotFoundError()


def _lock_settlement(settlement_id):
    try:
        return (
            Settlement.objects
            .select_for_update()
            .get(id=settlement_id, deleted_at__isnull=True)
        )
    except Settlement.DoesNotExist:
        raise SettlementNotFoundError()


@transaction.atomic
def record_payment(
    *,
    settlement_id: UUID,
    amount: Decimal,
    paid_at: datetime,
    recorded_by: User,
    payment_method: str = '',
    payment_reference: str = '',
    notes: str = ''
) -> Tuple[Payment, Settlement]:
    """
    Record a payment towards a settlement and update its status.

    Uses SELECT FOR UPDATE on the settlement so concurrent payments are
    applied one after another.

    Args:
        settlement_id: UUID of the settlement
        amount: Payment amount in the trip's base currency
        paid_at: When the money changed hands
        recorded_by: User logging the payment
        payment_method: e.g. 'Cash', 'Bank transfer'
        payment_reference: e.g. a transaction ID
        notes: Free text

    Returns:
        tuple: (Payment, Settlement) with the settlement's new status

    Raises:
        SettlementNotFoundError: If settlement doesn't exist
        SettlementAlreadyPaidError: If settlement is paid or verified
        PaymentExceedsSettlementError: If the payment overshoots the amount
    """
    settlement = _lock_settlement(settlement_id)

    if settlement.status in [SettlementStatus.PAID, SettlementStatus.VERIFIED]:
        raise SettlementAlreadyPaidError()

    amount = round_money(amount)
    new_total_paid = settlement.get_total_paid() + amount

    if new_total_paid - settlement.amount >= settings.SETTLEMENT_EPSILON:
        raise PaymentExceedsSettlementError(
            f"Payment would bring total paid to {new_total_paid}, "
            f"settlement amount is {settlement.amount}."
        )

    payment = Payment.objects.create(
        settlement=settlement,
        amount=amount,
        paid_at=paid_at,
        payment_method=payment_method,
        payment_reference=payment_reference,
        notes=notes,
        recorded_by=recorded_by,
    )

    settlement.status = settlement_status_for(settlement.amount, new_total_paid)
    settlement.save(update_fields=['status', 'updated_at'])

    logger.info(
        "Payment %s of %s recorded on settlement %s by %s; %s of %s paid (%s)",
        payment.id, amount, settlement.id, recorded_by.id,
        new_total_paid, settlement.amount, settlement.status
    )
    return payment, settlement


@transaction.atomic
def delete_payment(*, settlement_id: UUID, payment_id: UUID) -> Settlement:
    """
    Remove a payment and recompute the settlement status.

    Raises:
        SettlementNotFoundError: If settlement doesn't exist
        PaymentNotFoundError: If the payment isn't on this settlement
    """
    settlement = _lock_settlement(settlement_id)

    try:
        payment = settlement.payments.get(id=payment_id)
    except Payment.DoesNotExist:
        raise PaymentNotFoundError()

    payment.delete()

    settlement.status = settlement_status_for(settlement.amount, settlement.get_total_paid())
    settlement.save(update_fields=['status', 'updated_at'])

    logger.info("Payment %s removed from settlement %s (%s)", payment_id, settlement.id, settlement.status)
    return settlement
