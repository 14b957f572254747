"""Organization Domain Entity

Tenant and billing unit. Owns members, usage counters and the pay-as-you-go
credit balance.
"""

from datetime import datetime, date
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import CheckConstraint, Integer, Numeric, String
from src.domain.base import BaseModel, generate_uuid


class SubscriptionTier(str, Enum):
    """Subscription plans"""
    FREE = "free"
    INDIVIDUAL = "individual"
    TEAM = "team"
    ENTERPRISE = "enterprise"
    PAYG = "payg"            # Pay-as-you-go, billed from credits_balance


class SubscriptionStatus(str, Enum):
    """Subscription status types"""
    ACTIVE = "active"
    TRIALING = "trialing"
    PAST_DUE = "past_due"
    CANCELLED = "cancelled"
    INACTIVE = "inactive"


class BillingInterval(str, Enum):
    MONTHLY = "monthly"
    ANNUAL = "annual"


class Organization(BaseModel, table=True):
    """
    Organization - Tenant record with usage counters and credit balance

    Domain Rules:
    - credits_balance >= 0 always; only the ledger writes it
    - calls_used grows within a period and is reset lazily at the boundary
      (daily for the free tier, per billing period otherwise)
    - Organizations are never deleted, only deactivated (is_active = False)
    """

    __tablename__ = "organizations"
    __table_args__ = (
        CheckConstraint('credits_balance >= 0', name='credits_balance_non_negative'),
        CheckConstraint('calls_used >= 0', name='calls_used_non_negative'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Organization identifier (uuid)"
    )

    name: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Display name"
    )

    owner_id: str = Field(
        index=True,
        description="User ID of the owner"
    )

    subscription_tier: SubscriptionTier = Field(
        default=SubscriptionTier.FREE,
        description="Current subscription plan"
    )

    subscription_status: SubscriptionStatus = Field(
        default=SubscriptionStatus.ACTIVE,
        description="Current subscription status"
    )

    billing_interval: BillingInterval = Field(
        default=BillingInterval.MONTHLY,
        description="Billing interval of the current subscription"
    )

    calls_used: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Calls analyzed in the current period"
    )

    calls_limit: int = Field(
        default=3,
        sa_column=Column(Integer, nullable=False, default=3),
        description="Calls allowed in the current period"
    )

    storage_used_mb: float = Field(
        default=0,
        sa_column=Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0),
        description="Audio storage used (MB)"
    )

    storage_limit_mb: int = Field(
        default=50,
        sa_column=Column(Integer, nullable=False, default=50),
        description="Audio storage allowance (MB)"
    )

    users_limit: int = Field(
        default=1,
        sa_column=Column(Integer, nullable=False, default=1),
        description="Seat allowance"
    )

    credits_balance: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Pay-as-you-go credit balance (must be >= 0)"
    )

    daily_reset_date: Optional[date] = Field(
        default=None,
        description="Date the daily counters were last reset (free tier)"
    )

    current_period_start: Optional[datetime] = Field(
        default=None,
        description="Start of the current billing period"
    )

    current_period_end: Optional[datetime] = Field(
        default=None,
        description="End of the current billing period"
    )

    billing_email: Optional[str] = Field(
        default=None,
        description="Email address that receives invoices"
    )

    is_active: bool = Field(
        default=True,
        description="False once the organization is deactivated"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )
