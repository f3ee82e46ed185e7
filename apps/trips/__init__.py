"""
Trips App - Trip Ledger

This app owns trips, their members and the shared-expense ledger that the
settlements app calculates balances from.

Key Features:
- Trip creation with a base currency
- Membership with roles and RSVP
- Expenses with a fixed exchange rate captured at entry time
- Equal, custom and percentage share assignments with cent-precise splits
- Soft deletion (deleted expenses drop out of balances)

Architecture:
- Models: Trip, TripMember, Expense, ShareAssignment
- Services: trip_management, expense_management
- Exceptions: services.exceptions
"""
