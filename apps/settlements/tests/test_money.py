"""
Unit tests for money helpers.

Pure functions, no database.
"""

import pytest
from decimal import Decimal

from apps.settlements.money import (
    ZERO,
    from_minor_units,
    is_within_epsilon,
    normalize_amount,
    round_money,
    split_by_percentages,
    split_evenly,
    to_decimal,
    to_minor_units,
)


class TestToDecimal:

    def test_float_goes_through_str(self):
        assert to_decimal(0.1) == Decimal('0.1')

    def test_none_is_zero(self):
        assert to_decimal(None) == ZERO

    def test_decimal_passthrough(self):
        value = Decimal('12.345')
        assert to_decimal(value) is value

    def test_garbage_raises_value_error(self):
        with pytest.raises(ValueError):
            to_decimal('twelve')


class TestRounding:

    def test_round_half_up(self):
        assert round_money(Decimal('0.005')) == Decimal('0.01')
        assert round_money(Decimal('2.675')) == Decimal('2.68')
        assert round_money(Decimal('-0.005')) == Decimal('-0.01')

    def test_normalize_amount(self):
        assert normalize_amount(Decimal('100.00'), Decimal('0.5')) == Decimal('50.00')
        assert normalize_amount('10.01', '0.5') == Decimal('5.01')
        assert normalize_amount(Decimal('42.50'), Decimal('1.0834')) == Decimal('46.04')

    def test_minor_units(self):
        assert to_minor_units(Decimal('12.34')) == 1234
        assert from_minor_units(1234) == Decimal('12.34')

    def test_is_within_epsilon(self):
        assert is_within_epsilon(Decimal('0.005'))
        assert is_within_epsilon(Decimal('-0.005'))
        assert not is_within_epsilon(Decimal('0.01'))


class TestSplitEvenly:

    def test_leftover_cents_go_first(self):
        assert split_evenly(Decimal('100.00'), 3) == [
            Decimal('33.34'), Decimal('33.33'), Decimal('33.33')
        ]

    def test_even_split(self):
        assert split_evenly(Decimal('90.00'), 3) == [Decimal('30.00')] * 3

    def test_sums_to_total(self):
        shares = split_evenly(Decimal('10.01'), 7)
        assert sum(shares, ZERO) == Decimal('10.01')

    def test_zero_parts_rejected(self):
        with pytest.raises(ValueError):
            split_evenly(Decimal('10.00'), 0)


class TestSplitByPercentages:

    def test_whole_percentages(self):
        shares = split_by_percentages(
            Decimal('100.00'),
            [Decimal('50'), Decimal('30'), Decimal('20')]
        )
        assert shares == [Decimal('50.00'), Decimal('30.00'), Decimal('20.00')]

    def test_leftover_cent_goes_to_largest_fraction(self):
        shares = split_by_percentages(
            Decimal('10.00'),
            [Decimal('33.33'), Decimal('33.33'), Decimal('33.34')]
        )
        assert shares == [Decimal('3.33'), Decimal('3.33'), Decimal('3.34')]

    def test_under_100_percent_is_allowed(self):
        shares = split_by_percentages(Decimal('100.00'), [Decimal('25'), Decimal('25')])
        assert sum(shares, ZERO) == Decimal('50.00')

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            split_by_percentages(Decimal('100.00'), [])
