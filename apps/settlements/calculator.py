"""
Balance Calculator
==================

Pure balance and settlement math for a trip ledger.

The functions in this module take plain in-memory records (no models, no
querysets, no request objects) and return plain records, so they can be
called from services, management commands or tests alike. Nothing here
touches the database and nothing is cached between calls.

Classes:
    ExpenseRecord: One expense paid by a member on behalf of the group.
    ShareAssignment: One member's portion of an expense.
    MemberBalance: Derived per-member totals.
    SettlementTransfer: A suggested payment from a debtor to a creditor.
    TripBalanceSummary: Everything the balances endpoint reports.

Functions:
    compute_balances: Aggregate a ledger into per-member balances.
    compute_settlement_transfers: Greedy largest-first debt reduction.
    oldest_debt_dates: Earliest expense date per debtor/creditor pair.
    summarize_trip: Compose the three above into one summary.

Example:
    Settling a single shared dinner::

        from decimal import Decimal
        from apps.settlements.calculator import (
            ExpenseRecord, ShareAssignment,
            compute_balances, compute_settlement_transfers,
        )

        dinner = ExpenseRecord(
            id=1,
            payer_id='ana',
            normalized_amount=Decimal('100.00'),
            assignments=(
                ShareAssignment(member_id='ana', normalized_share_amount=Decimal('33.33')),
                ShareAssignment(member_id='ben', normalized_share_amount=Decimal('33.33')),
                ShareAssignment(member_id='cat', normalized_share_amount=Decimal('33.34')),
            ),
        )
        balances = compute_balances([dinner])
        transfers = compute_settlement_transfers(balances)
        # cat -> ana 33.34, ben -> ana 33.33

Note:
    Amounts are expected to be normalized into the trip's base currency by
    the caller. Input is not validated: negative or NaN amounts flow through
    the sums unchanged and non-finite balances are skipped when building
    transfers.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .money import EPSILON, ZERO, is_within_epsilon, round_money, to_decimal


logger = logging.getLogger(__name__)


SPLIT_EQUAL = 'equal'
SPLIT_CUSTOM = 'custom'

STATUS_OPEN = 'open'
STATUS_CLOSED = 'closed'


class SettlementCalculationError(Exception):
    """Raised when transfer reduction fails to converge (internal logic error)."""
    pass


@dataclass(frozen=True)
class ShareAssignment:
    """A member's portion of one expense."""

    member_id: Any
    normalized_share_amount: Decimal
    share_amount: Optional[Decimal] = None
    split_type: str = SPLIT_EQUAL
    expense_id: Any = None


@dataclass(frozen=True)
class ExpenseRecord:
    """Money spent by one member on behalf of the group."""

    id: Any
    payer_id: Any
    normalized_amount: Decimal
    amount: Optional[Decimal] = None
    currency: str = ''
    fx_rate: Decimal = Decimal('1')
    status: str = STATUS_OPEN
    date: Optional[date] = None
    trip_id: Any = None
    assignments: Sequence[ShareAssignment] = field(default_factory=tuple)


@dataclass(frozen=True)
class MemberBalance:
    """Positive net_balance means the member is owed money."""

    member_id: Any
    total_paid: Decimal
    total_owed_share: Decimal
    net_balance: Decimal


@dataclass(frozen=True)
class SettlementTransfer:
    from_member: Any
    to_member: Any
    amount: Decimal
    oldest_debt_date: Optional[date] = None


@dataclass(frozen=True)
class TripBalanceSummary:
    trip_id: Any
    base_currency: str
    total_spent: Decimal
    balances: List[MemberBalance]
    settlements: List[SettlementTransfer]
    calculated_at: datetime


def compute_balances(expenses: Iterable[ExpenseRecord]) -> List[MemberBalance]:
    """
    Aggregate a ledger into per-member balances.

    For each expense the payer's ``total_paid`` grows by the expense's
    normalized amount, and every assigned member's ``total_owed_share``
    grows by their normalized share. Assignments are not required to add up
    to the expense amount.

    Args:
        expenses (Iterable[ExpenseRecord]): The trip's active expenses with
            their assignments attached.

    Returns:
        list[MemberBalance]: One entry per member that paid or was assigned
        anything, in order of first appearance in the ledger. Members with
        no activity are not listed; an empty ledger gives an empty list.

    Example::

        >>> balances = compute_balances([
        ...     ExpenseRecord(id=1, payer_id='A', normalized_amount=Decimal('50'),
        ...                   assignments=(ShareAssignment('A', Decimal('25')),
        ...                                ShareAssignment('B', Decimal('25')))),
        ... ])
        >>> [(b.member_id, b.net_balance) for b in balances]
        [('A', Decimal('25.00')), ('B', Decimal('-25.00'))]
    """
    totals: Dict[Any, List[Decimal]] = {}

    for expense in expenses:
        payer = totals.setdefault(expense.payer_id, [ZERO, ZERO])
        payer[0] += to_decimal(expense.normalized_amount)

        for assignment in expense.assignments:
            assignee = totals.setdefault(assignment.member_id, [ZERO, ZERO])
            assignee[1] += to_decimal(assignment.normalized_share_amount)

    return [
        MemberBalance(
            member_id=member_id,
            total_paid=paid,
            total_owed_share=owed,
            net_balance=paid - owed,
        )
        for member_id, (paid, owed) in totals.items()
    ]


def _tie_break_key(member_id):
    return str(member_id)


def _pick_largest(pool: Dict[Any, Decimal]):
    """Member with the largest remaining amount; lowest member id wins ties."""
    return min(pool, key=lambda m: (-pool[m], _tie_break_key(m)))


def compute_settlement_transfers(
    balances: Iterable[MemberBalance],
    debt_dates: Optional[Dict[Tuple[Any, Any], date]] = None,
    epsilon=EPSILON,
) -> List[SettlementTransfer]:
    """
    Produce a short list of transfers that settles every balance.

    Greedy largest-first reduction:
        1. Members with ``net_balance > epsilon`` are creditors, members
           with ``net_balance < -epsilon`` are debtors, everyone else
           (a balance of exactly one epsilon included) is settled and left out.
        2. Pick the largest debtor and the largest creditor (ties go to the
           lowest member id), move ``min(debt, credit)`` rounded to cents
           from one to the other, and drop whichever side that transfer
           covers. The other side is dropped too once it is within epsilon.
        3. Repeat until one side is empty.

    Each pass removes at least one member, so n unsettled members need at
    most n - 1 transfers. This is not guaranteed to be the minimum number of
    transfers for every ledger; the largest-first order is kept because it
    is deterministic and easy to audit.

    Args:
        balances (Iterable[MemberBalance]): Output of :func:`compute_balances`.
            Repeated member ids are summed.
        debt_dates (dict, optional): ``{(debtor_id, creditor_id): date}``
            as built by :func:`oldest_debt_dates`. Used only to annotate
            transfers. Defaults to None.
        epsilon (Decimal, optional): Settled tolerance in base currency
            units. Defaults to one cent.

    Returns:
        list[SettlementTransfer]: Transfers in the order generated, which is
        also largest-first.

    Raises:
        SettlementCalculationError: If the reduction does not finish within
            one pass per unsettled member. This indicates a bug, not bad
            input.
    """
    epsilon = to_decimal(epsilon)
    debt_dates = debt_dates or {}

    nets: Dict[Any, Decimal] = {}
    for balance in balances:
        net = to_decimal(balance.net_balance)
        if not net.is_finite():
            logger.warning("Skipping non-finite balance for member %s", balance.member_id)
            continue
        nets[balance.member_id] = nets.get(balance.member_id, ZERO) + net

    creditors = {m: net for m, net in nets.items() if net > epsilon}
    debtors = {m: -net for m, net in nets.items() if net < -epsilon}

    max_passes = len(creditors) + len(debtors)
    passes = 0
    transfers = []

    while creditors and debtors:
        if passes >= max_passes:
            logger.error(
                "Settlement reduction exceeded %d passes (%d creditors, %d debtors left)",
                max_passes, len(creditors), len(debtors)
            )
            raise SettlementCalculationError(
                f"Settlement reduction did not converge after {max_passes} passes"
            )
        passes += 1

        debtor = _pick_largest(debtors)
        creditor = _pick_largest(creditors)
        debt = debtors[debtor]
        credit = creditors[creditor]

        amount = round_money(min(debt, credit))
        if amount > ZERO:
            transfers.append(SettlementTransfer(
                from_member=debtor,
                to_member=creditor,
                amount=amount,
                oldest_debt_date=debt_dates.get((debtor, creditor)),
            ))

        debtors[debtor] = debt - amount
        creditors[creditor] = credit - amount

        # Whichever side was smaller is covered by this transfer
        if debt <= credit or is_within_epsilon(debtors[debtor], epsilon):
            del debtors[debtor]
        if credit <= debt or is_within_epsilon(creditors[creditor], epsilon):
            del creditors[creditor]

    logger.debug(
        "Computed %d settlement transfers for %d members",
        len(transfers), len(nets)
    )
    return transfers


def oldest_debt_dates(expenses: Iterable[ExpenseRecord]) -> Dict[Tuple[Any, Any], date]:
    """
    Earliest expense date per (assignee, payer) pair.

    Only assignments with a positive share for someone other than the payer
    count; expenses without a date are ignored.
    """
    dates: Dict[Tuple[Any, Any], date] = {}

    for expense in expenses:
        if expense.date is None:
            continue
        for assignment in expense.assignments:
            if assignment.member_id == expense.payer_id:
                continue
            share = to_decimal(assignment.normalized_share_amount)
            if not share.is_finite() or share <= ZERO:
                continue
            key = (assignment.member_id, expense.payer_id)
            if key not in dates or expense.date < dates[key]:
                dates[key] = expense.date

    return dates


def summarize_trip(
    trip_id,
    base_currency: str,
    expenses: Iterable[ExpenseRecord],
    calculated_at: Optional[datetime] = None,
    epsilon=EPSILON,
) -> TripBalanceSummary:
    """
    Build the full balance report for one trip.

    Args:
        trip_id: Identifier echoed back in the summary.
        base_currency (str): Label for the amounts; no conversion happens here.
        expenses (Iterable[ExpenseRecord]): Active expenses of the trip.
        calculated_at (datetime, optional): Report timestamp. Defaults to
            the current UTC time.
        epsilon (Decimal, optional): Settled tolerance. Defaults to one cent.

    Returns:
        TripBalanceSummary: Total spent, balances and suggested transfers.
    """
    expenses = list(expenses)

    total_spent = sum(
        (to_decimal(expense.normalized_amount) for expense in expenses),
        ZERO
    )
    balances = compute_balances(expenses)
    settlements = compute_settlement_transfers(
        balances,
        debt_dates=oldest_debt_dates(expenses),
        epsilon=epsilon,
    )

    return TripBalanceSummary(
        trip_id=trip_id,
        base_currency=base_currency,
        total_spent=total_spent,
        balances=balances,
        settlements=settlements,
        calculated_at=calculated_at or datetime.now(timezone.utc),
    )
