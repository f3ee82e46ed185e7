"""
Trip management service.

Handles trip creation and membership with proper transaction safety.
"""

from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction, IntegrityError

from apps.accounts.models import User
from apps.trips.models import Trip, TripMember, TripRole, RsvpStatus

from .exceptions import (
    TripNotFoundError,
    AlreadyTripMemberError,
    NotTripMemberError,
)


@transaction.atomic
def create_trip(
    *,
    name: str,
    owner: User,
    base_currency: Optional[str] = None,
    description: str = ''
) -> Trip:
    """
    Create a new trip and add the creator as owner.

    Args:
        name: Trip name
        owner: User who will own the trip
        base_currency: ISO 4217 code all expenses normalize into
            (defaults to DEFAULT_BASE_CURRENCY)
        description: Optional trip description

    Returns:
        Created Trip instance
    """
    trip = Trip.objects.create(
        name=name,
        owner=owner,
        description=description,
        base_currency=(base_currency or settings.DEFAULT_BASE_CURRENCY).upper(),
    )

    TripMember.objects.create(
        trip=trip,
        user=owner,
        role=TripRole.OWNER,
        rsvp=RsvpStatus.GOING,
    )

    return trip


def get_trip_by_id(*, trip_id: UUID) -> Trip:
    """
    Get an active (not soft-deleted) trip.

    Raises:
        TripNotFoundError: If trip doesn't exist or was deleted
    """
    try:
        return Trip.active.select_related('owner').get(id=trip_id)
    except Trip.DoesNotExist:
        raise TripNotFoundError(f"Trip with ID {trip_id} not found")


@transaction.atomic
def add_trip_member(
    *,
    trip_id: UUID,
    user: User,
    role: str = TripRole.MEMBER
) -> TripMember:
    """
    Add a user to a trip.

    Args:
        trip_id: UUID of the trip
        user: User joining the trip
        role: 'admin' or 'member'

    Returns:
        Created TripMember instance

    Raises:
        TripNotFoundError: If trip doesn't exist
        AlreadyTripMemberError: If user is already on the trip
        ValueError: If role is invalid
    """
    if role not in [TripRole.ADMIN, TripRole.MEMBER]:
        raise ValueError(f"Invalid role. Must be one of: {[TripRole.ADMIN, TripRole.MEMBER]}")

    # Lock the trip to serialize concurrent joins
    try:
        trip = Trip.active.select_for_update().get(id=trip_id)
    except Trip.DoesNotExist:
        raise TripNotFoundError(f"Trip with ID {trip_id} not found")

    if trip.has_member(user):
        raise AlreadyTripMemberError(f"User is already a member of {trip.name}")

    try:
        return TripMember.objects.create(trip=trip, user=user, role=role)
    except IntegrityError:
        raise AlreadyTripMemberError(f"User is already a member of {trip.name}")


@transaction.atomic
def update_rsvp(*, trip_id: UUID, user: User, rsvp: str) -> TripMember:
    """
    Record a member's RSVP.

    Raises:
        NotTripMemberError: If user is not on the trip
        ValueError: If rsvp is not a known status
    """
    if rsvp not in RsvpStatus.values:
        raise ValueError(f"Invalid RSVP. Must be one of: {RsvpStatus.values}")

    try:
        membership = (
            TripMember.objects
            .select_for_update()
            .get(trip_id=trip_id, user=user)
        )
    except TripMember.DoesNotExist:
        raise NotTripMemberError("User is not a member of this trip")

    membership.rsvp = rsvp
    membership.save(update_fields=['rsvp'])
    return membership
