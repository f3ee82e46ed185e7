"""
Money Helpers
=============

Cent-precise helpers shared by the ledger and the balance calculator.

Every place that normalizes an amount into a trip's base currency goes
through :func:`round_money`, so sums built from normalized amounts are
stable no matter where they were computed.

Functions:
    to_decimal: Coerce int/str/float/Decimal into Decimal.
    round_money: Round to cents, half-up.
    normalize_amount: Convert an amount with a fixed exchange rate.
    split_evenly: Split a total into N parts that sum exactly to it.
    split_by_percentages: Split a total by percentage weights.

Example:
    Normalizing a EUR expense into a USD trip::

        from apps.settlements.money import normalize_amount

        normalize_amount(Decimal('42.50'), Decimal('1.0834'))
        # Decimal('46.04')
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation


CENT = Decimal('0.01')
ZERO = Decimal('0.00')

# Balances closer to zero than this are considered settled.
EPSILON = Decimal('0.01')


def to_decimal(value):
    """
    Coerce a numeric value into a Decimal.

    Floats go through ``str()`` so ``0.1`` becomes ``Decimal('0.1')`` rather
    than its binary expansion. ``None`` is treated as zero.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError):
        raise ValueError(f"Not a monetary value: {value!r}")


def round_money(value):
    """Round to 2 decimal places using ROUND_HALF_UP."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def normalize_amount(amount, fx_rate):
    """
    Convert an amount into the base currency with a fixed exchange rate.

    The rate is the one captured when the expense was entered, never a live
    rate.

    Args:
        amount (Decimal | int | str | float): Amount in the original currency.
        fx_rate (Decimal | int | str | float): Units of base currency per
            unit of original currency.

    Returns:
        Decimal: ``amount * fx_rate`` rounded half-up to cents.

    Example::

        >>> normalize_amount(Decimal('100.00'), Decimal('0.5'))
        Decimal('50.00')
        >>> normalize_amount('10.01', '0.5')
        Decimal('5.01')
    """
    return round_money(to_decimal(amount) * to_decimal(fx_rate))


def to_minor_units(amount):
    """Return the amount in whole cents (rounded half-up)."""
    return int(round_money(amount) * 100)


def from_minor_units(units):
    """Return a Decimal amount for a whole number of cents."""
    return (Decimal(int(units)) / Decimal(100)).quantize(CENT)


def is_within_epsilon(value, epsilon=EPSILON):
    """True when ``value`` is closer to zero than ``epsilon``."""
    return abs(to_decimal(value)) < to_decimal(epsilon)


def split_evenly(total, parts):
    """
    Split an amount into ``parts`` cent-precise shares.

    Algorithm:
        1. Convert to cents: ``total_cents = total * 100``
        2. Base share: ``base = total_cents // parts``
        3. Remainder: ``remainder = total_cents % parts``
        4. First ``remainder`` shares get ``base + 1`` cents, the rest ``base``

    Args:
        total (Decimal): Amount to split.
        parts (int): Number of shares.

    Returns:
        list[Decimal]: Shares in order; they always sum to ``round_money(total)``.

    Raises:
        ValueError: If ``parts`` is less than 1.

    Example::

        >>> split_evenly(Decimal('100.00'), 3)
        [Decimal('33.34'), Decimal('33.33'), Decimal('33.33')]
    """
    if parts < 1:
        raise ValueError("At least one share required")

    total_cents = to_minor_units(total)
    base_cents, remainder_cents = divmod(total_cents, parts)

    shares = []
    for i in range(parts):
        cents = base_cents + 1 if i < remainder_cents else base_cents
        shares.append(from_minor_units(cents))

    # Safety check
    if sum(shares, ZERO) != round_money(total):
        raise ValueError(f"Split calculation error: {sum(shares)} != {total}")

    return shares


def split_by_percentages(total, percentages):
    """
    Split an amount by percentage weights.

    Each share is floored to whole cents, then the leftover cents go one at a
    time to the shares with the largest dropped fraction (input order breaks
    ties). When the percentages add up to 100 the
    shares sum exactly to the total; otherwise they sum to the matching
    fraction of it (over/under assignment is allowed and surfaced elsewhere).

    Args:
        total (Decimal): Amount to split.
        percentages (list[Decimal]): One weight per share, in percent.

    Returns:
        list[Decimal]: One share per weight.
    """
    if not percentages:
        raise ValueError("At least one percentage required")

    total_cents = to_minor_units(total)
    weights = [to_decimal(p) for p in percentages]

    exact = [Decimal(total_cents) * w / Decimal(100) for w in weights]
    floored = [int(e) for e in exact]
    target_cents = int(
        (Decimal(total_cents) * sum(weights, ZERO) / Decimal(100))
        .quantize(Decimal(1), rounding=ROUND_HALF_UP)
    )

    leftover = target_cents - sum(floored)
    by_fraction = sorted(
        range(len(floored)),
        key=lambda i: (-(exact[i] - floored[i]), i)
    )
    for i in by_fraction[:max(leftover, 0)]:
        floored[i] += 1

    return [from_minor_units(cents) for cents in floored]
