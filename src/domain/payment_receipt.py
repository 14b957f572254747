"""Payment Receipt Domain Entity

One row per settled gateway payment. The unique payment_id is the anchor that
keeps receipt creation (and subscription activation) exactly-once.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional
from sqlmodel import Field, Column
from sqlalchemy import JSON, Numeric, String
from src.domain.base import BaseModel, BigIntId


class PaymentType(str, Enum):
    SUBSCRIPTION = "subscription"
    CREDITS = "credits"


class ReceiptStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentReceipt(BaseModel, table=True):
    """
    Payment Receipt - Immutable record of a settled payment

    Domain Rules:
    - payment_id and invoice_number are unique
    - amount is what the customer paid, in major units; the invoice total
      including tax lives in invoice_data
    - invoice_data is a frozen snapshot and is never recomputed
    """

    __tablename__ = "payment_receipts"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntId, primary_key=True, autoincrement=True),
    )

    organization_id: str = Field(
        foreign_key="organizations.id",
        index=True,
    )

    user_id: Optional[str] = Field(default=None)

    payment_id: str = Field(
        sa_column=Column(String(64), unique=True, nullable=False),
        description="Gateway payment id (idempotency anchor)"
    )

    order_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(64), nullable=True),
    )

    invoice_number: str = Field(
        sa_column=Column(String(32), unique=True, nullable=False),
        description="Human-readable invoice number (INV-YYYYMM-XXXXXXXX)"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Amount paid in major units"
    )

    currency: str = Field(
        sa_column=Column(String(3), nullable=False),
    )

    payment_type: PaymentType = Field(
        description="What was paid for (subscription, credits)"
    )

    status: ReceiptStatus = Field(default=ReceiptStatus.COMPLETED)

    invoice_data: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False, default=dict),
        description="Frozen invoice document"
    )

    details: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False, default=dict),
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
