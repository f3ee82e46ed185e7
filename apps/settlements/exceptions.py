"""
Domain exceptions for settlements app.

Errors with a fixed HTTP meaning are DRF APIExceptions and can be raised
straight through a view. SettlementCalculationError comes from the pure
calculator and surfaces as a 500.
"""
from rest_framework.exceptions import APIException

from .calculator import SettlementCalculationError


class TripNotFoundError(APIException):
    """Trip not found or deleted."""
    status_code = 404
    default_detail = 'Trip not found.'
    default_code = 'trip_not_found'


class SettlementNotFoundError(APIException):
    """Settlement not found."""
    status_code = 404
    default_detail = 'Settlement not found.'
    default_code = 'settlement_not_found'


class PaymentNotFoundError(APIException):
    """Payment not found on this settlement."""
    status_code = 404
    default_detail = 'Payment not found.'
    default_code = 'payment_not_found'


class SettlementAlreadyPaidError(APIException):
    """Settlement is already fully paid."""
    status_code = 400
    default_detail = 'Settlement is already fully paid.'
    default_code = 'settlement_already_paid'


class PaymentExceedsSettlementError(APIException):
    """Payment would take the settlement past its amount."""
    status_code = 400
    default_detail = 'Payment would exceed the settlement amount.'
    default_code = 'payment_exceeds_settlement'


__all__ = [
    'SettlementCalculationError',
    'TripNotFoundError',
    'SettlementNotFoundError',
    'PaymentNotFoundError',
    'SettlementAlreadyPaidError',
    'PaymentExceedsSettlementError',
]
