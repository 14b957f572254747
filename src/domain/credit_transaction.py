"""Credit Transaction Domain Entity

Immutable append-only record of every change to an organization's
credits_balance. Summing delta per organization gives the balance.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Integer, JSON, Numeric, String
from src.domain.base import BaseModel, BigIntId


class TransactionType(str, Enum):
    """Credit transaction types"""
    PURCHASE = "purchase"    # Credits bought through the payment gateway
    USAGE = "usage"          # Credits spent on a call analysis
    REFUND = "refund"        # Credits returned (failure compensation)
    EXPIRY = "expiry"        # Credits removed when they lapse


class CreditTransaction(BaseModel, table=True):
    """
    Credit Transaction - Immutable ledger entry

    Domain Rules:
    - Transactions are immutable (append-only)
    - delta is signed: positive for purchase/refund, negative for usage/expiry
    - idempotency_key is unique when present; for purchases it is the
      gateway payment id, so one payment credits at most once
    - amount_paid/currency are set for purchases only
    """

    __tablename__ = "credit_transactions"
    __table_args__ = (
        Index('ix_credit_transactions_org_created', 'organization_id', 'created_at'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntId, primary_key=True, autoincrement=True),
        description="Unique transaction identifier (auto-increment)"
    )

    organization_id: str = Field(
        foreign_key="organizations.id",
        index=True,
        description="Organization whose balance changed"
    )

    user_id: Optional[str] = Field(
        default=None,
        description="User who caused the change, if any"
    )

    transaction_type: TransactionType = Field(
        description="Type of transaction (purchase, usage, refund, expiry)"
    )

    delta: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Signed change in credits"
    )

    balance_after: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Balance immediately after this entry"
    )

    amount_paid: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(12, 2), nullable=True),
        description="Money paid in major units (purchases only)"
    )

    currency: Optional[str] = Field(
        default=None,
        sa_column=Column(String(3), nullable=True),
    )

    description: Optional[str] = Field(
        default=None,
        sa_column=Column(String(500), nullable=True),
    )

    details: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False, default=dict),
        description="Free-form context (order id, call analysis id, ...)"
    )

    idempotency_key: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), unique=True, nullable=True),
        description="Deduplication key, gateway payment id for purchases"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Transaction timestamp (immutable)"
    )
