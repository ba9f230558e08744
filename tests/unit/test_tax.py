"""Unit tests for the income tax estimate"""

import math
import pytest
from freee_notifier.domain.tax import TAX_BRACKETS, TOTAL_DEDUCTION, estimate_tax, find_bracket_index


def test_estimate_below_deductions_is_zero():
    """Income under the deductions leaves nothing taxable"""
    estimate = estimate_tax(sales=1_000_000, expenses=500_000)

    assert estimate.income == 500_000
    assert TOTAL_DEDUCTION == 1_130_000
    assert estimate.taxable_income == 0
    assert estimate.estimated_tax == 0
    assert estimate.current_rate == 5


def test_estimate_lowest_bracket_has_no_lower_bracket():
    estimate = estimate_tax(sales=1_000_000, expenses=500_000)

    assert estimate.next_bracket_limit is None
    assert estimate.next_rate is None
    assert estimate.amount_to_next_bracket is None


def test_estimate_23_percent_bracket():
    """10M sales, no expenses → 8.87M taxable in the 23% bracket"""
    estimate = estimate_tax(sales=10_000_000, expenses=0)

    assert estimate.taxable_income == 8_870_000
    assert estimate.current_rate == 23
    # floor(8,870,000 * 0.23 - 636,000)
    assert estimate.estimated_tax == 1_404_100
    assert estimate.next_bracket_limit == 6_950_000
    assert estimate.next_rate == 20
    assert estimate.amount_to_next_bracket == 1_920_000


def test_estimate_on_bracket_limit_stays_in_bracket():
    """A taxable income equal to a limit belongs to that bracket"""
    estimate = estimate_tax(sales=1_950_000 + TOTAL_DEDUCTION, expenses=0)

    assert estimate.taxable_income == 1_950_000
    assert estimate.current_rate == 5
    assert estimate.estimated_tax == 97_500


def test_estimate_floors_fractional_tax():
    """5% of 1,001,001 is 50,050.05 → 50,050"""
    estimate = estimate_tax(sales=1_001_001 + TOTAL_DEDUCTION, expenses=0)

    assert estimate.estimated_tax == 50_050


def test_estimate_top_bracket():
    estimate = estimate_tax(sales=100_000_000, expenses=0)

    assert estimate.current_rate == 45
    assert estimate.estimated_tax == (98_870_000 * 45 - 4_796_000 * 100) // 100
    assert estimate.next_bracket_limit == 40_000_000
    assert estimate.next_rate == 40


def test_estimate_negative_income_does_not_raise():
    """Losses clamp taxable income at zero"""
    estimate = estimate_tax(sales=0, expenses=2_000_000)

    assert estimate.income == -2_000_000
    assert estimate.taxable_income == 0
    assert estimate.estimated_tax == 0
    assert estimate.current_rate == 5


@pytest.mark.parametrize(
    "taxable, expected_rate",
    [(0, 5), (1_950_001, 10), (3_300_000, 10), (6_950_001, 23), (18_000_000, 33), (40_000_001, 45)],
)
def test_find_bracket_index(taxable, expected_rate):
    assert TAX_BRACKETS[find_bracket_index(taxable)].rate == expected_rate


def test_tax_is_continuous_across_bracket_limits():
    """Quick-calculation deductions make adjacent brackets agree on their shared limit"""
    for lower, upper in zip(TAX_BRACKETS, TAX_BRACKETS[1:]):
        if math.isinf(lower.limit):
            continue
        limit = int(lower.limit)
        assert limit * lower.rate - lower.deduction * 100 == limit * upper.rate - upper.deduction * 100
