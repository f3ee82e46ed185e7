"""
Settlements App - Trip Balances and Settlement Plans

This app turns a trip's expense ledger into per-member balances and a short
list of suggested transfers, and tracks payments made against those
transfers once members act on them.

Key Features:
- Pure balance calculator (no Django imports) in calculator.py
- Greedy largest-first debt reduction, at most n - 1 transfers
- "Debt since" dates per debtor/creditor pair
- Cent-precise money helpers with one half-up rounding policy
- Persisted settlements with partial payments and status tracking

Architecture:
- Pure core: calculator, money
- Models: Settlement, Payment
- Services: balances (ledger adapter), settlements (persistence)
- Views: function-based API views with drf-spectacular schemas
- Permissions: trip membership
"""
