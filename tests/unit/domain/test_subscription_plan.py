"""Unit tests for the plan table and money helpers"""

import pytest
from datetime import datetime
from decimal import Decimal

from src.domain.organization import BillingInterval, SubscriptionTier
from src.domain.subscription_plan import (
    CREDIT_PACKAGES,
    Currency,
    TIER_ALLOWANCES,
    add_billing_interval,
    round_half_up,
    subscription_price,
    to_minor_units,
)


class TestRounding:

    def test_half_rounds_up_not_to_even(self):
        assert round_half_up(Decimal("2.5")) == Decimal("3")
        assert round_half_up(Decimal("40.5")) == Decimal("41")

    def test_minor_units_round_instead_of_truncating(self):
        assert to_minor_units(Decimal("225")) == 22500
        assert to_minor_units(Decimal("2.70")) == 270
        assert to_minor_units(Decimal("0.005")) == 1


class TestSubscriptionPrice:

    def test_monthly_price_comes_from_tier_table(self):
        assert subscription_price(
            SubscriptionTier.TEAM, BillingInterval.MONTHLY, Currency.INR
        ) == Decimal("1999")

    def test_annual_is_twelve_rounded_discounted_months(self):
        # 6 * 0.8 = 4.8 -> 5 per month
        assert subscription_price(
            SubscriptionTier.INDIVIDUAL, BillingInterval.ANNUAL, Currency.USD
        ) == Decimal("60")
        # 499 * 0.8 = 399.2 -> 399 per month
        assert subscription_price(
            SubscriptionTier.INDIVIDUAL, BillingInterval.ANNUAL, Currency.INR
        ) == Decimal("4788")

    def test_payg_has_no_subscription_price(self):
        with pytest.raises(ValueError):
            subscription_price(SubscriptionTier.PAYG, BillingInterval.MONTHLY, Currency.INR)


class TestBillingInterval:

    def test_month_end_is_clamped(self):
        assert add_billing_interval(
            datetime(2026, 1, 31, 10, 0), BillingInterval.MONTHLY
        ) == datetime(2026, 2, 28, 10, 0)

    def test_december_rolls_into_next_year(self):
        assert add_billing_interval(
            datetime(2026, 12, 15), BillingInterval.MONTHLY
        ) == datetime(2027, 1, 15)

    def test_annual_from_leap_day(self):
        assert add_billing_interval(
            datetime(2028, 2, 29), BillingInterval.ANNUAL
        ) == datetime(2029, 2, 28)


def test_every_tier_has_an_allowance():
    assert set(TIER_ALLOWANCES) == set(SubscriptionTier)
    assert TIER_ALLOWANCES[SubscriptionTier.FREE].daily_reset is True


def test_credit_packs_are_priced_in_both_currencies():
    pack = next(p for p in CREDIT_PACKAGES if p.credits == 50)
    assert pack.price(Currency.INR) == Decimal("225")
    assert pack.price(Currency.USD) == Decimal("2.70")
