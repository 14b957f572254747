"""Subscription plans and credit packs

Static allowance table for every tier plus the pay-as-you-go credit packs.
Monetary amounts are Decimal in major units (rupees, dollars).
"""

import calendar
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, Optional

from src.domain.organization import SubscriptionTier, BillingInterval


class Currency(str, Enum):
    INR = "INR"
    USD = "USD"


# Smallest chargeable amount per currency (INR 1 = 100 paise, USD 0.01 = 1 cent)
MIN_AMOUNT: Dict[Currency, Decimal] = {
    Currency.INR: Decimal("1"),
    Currency.USD: Decimal("0.01"),
}

DEFAULT_ANNUAL_DISCOUNT = Decimal("0.20")


def round_half_up(value: Decimal, exponent: str = "1") -> Decimal:
    """Round away from zero on .5 (2.5 -> 3, not banker's 2)"""
    return Decimal(value).quantize(Decimal(exponent), rounding=ROUND_HALF_UP)


def to_minor_units(amount: Decimal) -> int:
    return int(round_half_up(Decimal(amount) * 100))


@dataclass(frozen=True)
class TierAllowance:
    calls: int
    seats: int
    storage_mb: int
    monthly_price: Dict[Currency, Decimal]
    daily_reset: bool = False

    def price(self, currency: Currency) -> Optional[Decimal]:
        return self.monthly_price.get(currency)


TIER_ALLOWANCES: Dict[SubscriptionTier, TierAllowance] = {
    SubscriptionTier.FREE: TierAllowance(
        calls=3, seats=1, storage_mb=50,
        monthly_price={Currency.INR: Decimal("0"), Currency.USD: Decimal("0")},
        daily_reset=True,
    ),
    SubscriptionTier.INDIVIDUAL: TierAllowance(
        calls=50, seats=1, storage_mb=500,
        monthly_price={Currency.INR: Decimal("499"), Currency.USD: Decimal("6")},
    ),
    SubscriptionTier.TEAM: TierAllowance(
        calls=300, seats=10, storage_mb=5000,
        monthly_price={Currency.INR: Decimal("1999"), Currency.USD: Decimal("24")},
    ),
    SubscriptionTier.ENTERPRISE: TierAllowance(
        calls=1000, seats=999, storage_mb=50000,
        monthly_price={Currency.INR: Decimal("4999"), Currency.USD: Decimal("60")},
    ),
    # Calls are paid for from credits_balance
    SubscriptionTier.PAYG: TierAllowance(
        calls=0, seats=1, storage_mb=500,
        monthly_price={},
    ),
}

# Tiers that can be bought through a subscription order
PURCHASABLE_TIERS = frozenset({
    SubscriptionTier.INDIVIDUAL,
    SubscriptionTier.TEAM,
    SubscriptionTier.ENTERPRISE,
})


@dataclass(frozen=True)
class CreditPackage:
    credits: int
    price_inr: Decimal
    price_usd: Decimal

    def price(self, currency: Currency) -> Decimal:
        return self.price_inr if currency == Currency.INR else self.price_usd


CREDIT_PACKAGES = (
    CreditPackage(10, Decimal("50"), Decimal("0.60")),
    CreditPackage(25, Decimal("120"), Decimal("1.44")),
    CreditPackage(50, Decimal("225"), Decimal("2.70")),
    CreditPackage(100, Decimal("400"), Decimal("4.80")),
    CreditPackage(250, Decimal("900"), Decimal("10.80")),
    CreditPackage(500, Decimal("1600"), Decimal("19.20")),
)


def subscription_price(
    tier: SubscriptionTier,
    interval: BillingInterval,
    currency: Currency,
    annual_discount: Decimal = DEFAULT_ANNUAL_DISCOUNT,
) -> Decimal:
    """
    Price of one billing interval of a tier.

    Annual = round(monthly * (1 - discount)) * 12, so a yearly plan is twelve
    whole discounted months.
    """
    monthly = TIER_ALLOWANCES[tier].price(currency)
    if monthly is None:
        raise ValueError(f"Tier {tier.value} has no {currency.value} price")
    if interval == BillingInterval.ANNUAL:
        discounted = round_half_up(monthly * (Decimal(1) - Decimal(str(annual_discount))))
        return discounted * 12
    return monthly


def add_billing_interval(start: datetime, interval: BillingInterval) -> datetime:
    """Advance by one calendar month or year, clamping to the month's last day"""
    months = 12 if interval == BillingInterval.ANNUAL else 1
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)
