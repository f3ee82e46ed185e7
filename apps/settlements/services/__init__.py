"""
Settlements app services layer.

balances: read-only adapter from the trip ledger into the pure calculator.
settlements: persisted settlement plans and payment recording.
"""

from .balances import (
    load_trip_ledger,
    calculate_trip_balances,
    calculate_user_balance,
    get_member_directory,
)

from .settlements import (
    settlement_status_for,
    persist_settlement_plan,
    get_trip_settlements,
    get_settlement,
    record_payment,
    delete_payment,
)


__all__ = [
    # Balances
    'load_trip_ledger',
    'calculate_trip_balances',
    'calculate_user_balance',
    'get_member_directory',

    # Settlement persistence
    'settlement_status_for',
    'persist_settlement_plan',
    'get_trip_settlements',
    'get_settlement',
    'record_payment',
    'delete_payment',
]
