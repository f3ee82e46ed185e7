"""
Custom permission classes for settlements app.

Balances and settlements are visible to trip members only. Roles are not
consulted: any member may view the plan and record payments.
"""
from rest_framework.permissions import BasePermission

from apps.trips.models import Trip
from .exceptions import TripNotFoundError
from .services import get_settlement


def _is_member(trip, user):
    return trip.memberships.filter(user=user).exists()


class IsTripMember(BasePermission):
    """
    Permission to check if user is a member of the trip in the URL.

    Expects a ``trip_id`` URL kwarg. A missing or deleted trip is a 404,
    not a 403.

    Usage:
        @api_view(['GET'])
        @permission_classes([IsAuthenticated, IsTripMember])
        def trip_balances(request, trip_id):
            ...
    """

    message = 'You must be a member of this trip.'

    def has_permission(self, request, view):
        trip_id = view.kwargs.get('trip_id')
        try:
            trip = Trip.active.get(id=trip_id)
        except Trip.DoesNotExist:
            raise TripNotFoundError()
        return _is_member(trip, request.user)


class IsSettlementTripMember(BasePermission):
    """
    Permission to act on a settlement of a trip the user belongs to.

    Expects a ``settlement_id`` URL kwarg. A missing settlement is a 404.
    """

    message = 'You must be a member of this trip to manage its settlements.'

    def has_permission(self, request, view):
        settlement_id = view.kwargs.get('settlement_id')
        settlement = get_settlement(settlement_id=settlement_id)
        return _is_member(settlement.trip, request.user)
