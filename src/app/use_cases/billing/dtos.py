"""Data Transfer Objects for Billing Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field, field_validator

from src.domain.credit_transaction import TransactionType


class ApplyCreditDeltaCommandDTO(BaseModel):
    """
    Command DTO for changing an organization's credit balance

    Used as input to ApplyCreditDelta, the only writer of credits_balance.
    """

    organization_id: str = Field(
        ...,
        description="Organization identifier"
    )

    delta: int = Field(
        ...,
        description="Signed credit change (positive adds, negative deducts)"
    )

    transaction_type: TransactionType = Field(
        ...,
        description="purchase, usage, refund or expiry"
    )

    amount_paid: Optional[Decimal] = Field(
        default=None,
        description="Money paid in major units (purchases only)"
    )

    currency: Optional[str] = Field(default=None)

    description: Optional[str] = Field(default=None)

    idempotency_key: Optional[str] = Field(
        default=None,
        description="Deduplication key; the gateway payment id for purchases"
    )

    user_id: Optional[str] = Field(default=None)

    details: Dict[str, Any] = Field(
        default_factory=dict,
        description="Context stored with the transaction"
    )

    @field_validator("delta")
    @classmethod
    def _non_zero(cls, value: int) -> int:
        if value == 0:
            raise ValueError("delta must not be zero")
        return value

    class Config:
        json_schema_extra = {
            "example": {
                "organization_id": "6f1c2f5e-8a9b-4c1d-9e2f-3a4b5c6d7e8f",
                "delta": 50,
                "transaction_type": "purchase",
                "amount_paid": "225.00",
                "currency": "INR",
                "description": "Purchased 50 credits",
                "idempotency_key": "pay_NXk2l8yFh3ABCD12",
            }
        }


class LedgerEntryDTO(BaseModel):
    """
    Response DTO for a ledger write

    already_processed is True when the idempotency key had been applied
    before and the stored transaction is returned unchanged.
    """

    transaction_id: int
    organization_id: str
    transaction_type: str
    delta: int
    balance_after: int
    amount_paid: Optional[Decimal] = None
    currency: Optional[str] = None
    description: Optional[str] = None
    idempotency_key: Optional[str] = None
    created_at: datetime
    already_processed: bool = False


class BalanceResponseDTO(BaseModel):
    """
    Response DTO for get balance operation

    Returned by GetCreditBalance use case.
    """

    organization_id: str = Field(
        ...,
        description="Organization identifier"
    )

    balance: int = Field(
        ...,
        description="Current credit balance"
    )

    subscription_tier: str = Field(
        ...,
        description="Current plan"
    )

    last_updated: datetime = Field(
        ...,
        description="Timestamp of last balance update"
    )


class TransactionDTO(BaseModel):
    id: int
    transaction_type: str
    delta: int
    balance_after: int
    amount_paid: Optional[Decimal] = None
    currency: Optional[str] = None
    description: Optional[str] = None
    reference: Optional[str] = Field(default=None, description="Payment id or call analysis the entry settles")
    created_at: datetime


class ListTransactionsResponseDTO(BaseModel):
    transactions: List[TransactionDTO]
    total: int
    limit: int
    offset: int


class QuotaCheckCommandDTO(BaseModel):
    organization_id: str
    requested_units: int = Field(default=1, ge=1)
    storage_mb: float = Field(default=0, ge=0)


class QuotaDecisionDTO(BaseModel):
    """
    Admission decision for a billable action

    For pay-as-you-go organizations current_used is 0 and limit is the
    credit balance.
    """

    allowed: bool
    current_used: int
    limit: int
    remaining: int
    subscription_tier: str
    reason: Optional[str] = None


class RecordUsageCommandDTO(BaseModel):
    organization_id: str
    user_id: Optional[str] = None
    call_analysis_id: str = Field(..., min_length=1)
    units: int = Field(default=1, ge=1)
    file_size_mb: float = Field(default=0, ge=0)


class RecordUsageResponseDTO(BaseModel):
    organization_id: str
    subscription_tier: str
    calls_recorded: int
    credits_charged: int = 0
    credits_balance: Optional[int] = None


class GenerateInvoiceCommandDTO(BaseModel):
    """
    Command DTO for persisting the receipt of a settled payment
    """

    organization_id: str
    user_id: Optional[str] = None
    payment_id: str
    order_id: Optional[str] = None
    payment_type: str = Field(..., description="credits or subscription")
    amount: Decimal = Field(..., gt=0, description="Amount paid in major units")
    currency: str
    credits: Optional[int] = None
    subscription_tier: Optional[str] = None
    billing_interval: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None


class ReceiptDTO(BaseModel):
    invoice_number: str
    payment_id: str
    order_id: Optional[str] = None
    organization_id: str
    amount: Decimal
    currency: str
    payment_type: str
    status: str
    invoice: Dict[str, Any]
    created_at: datetime
    already_existed: bool = False


class LedgerDiscrepancyDTO(BaseModel):
    """
    DTO representing a single ledger discrepancy

    Used in reconciliation results.
    """

    organization_id: str = Field(
        ...,
        description="Organization identifier"
    )

    credits_balance: int = Field(
        ...,
        description="Balance stored on the organization"
    )

    calculated_balance: int = Field(
        ...,
        description="Sum of all transaction deltas"
    )

    discrepancy: int = Field(
        ...,
        description="credits_balance - calculated_balance"
    )


class ReconciliationResultDTO(BaseModel):
    """
    DTO for reconciliation operation result
    """

    total_organizations_checked: int = Field(
        ...,
        description="Number of organizations checked"
    )

    discrepancies_found: int = Field(
        ...,
        description="Number of discrepancies found"
    )

    discrepancies: List[LedgerDiscrepancyDTO] = Field(
        default_factory=list,
    )

    reconciliation_time: datetime = Field(
        ...,
        description="When reconciliation was performed"
    )

    execution_time_ms: int = Field(
        ...,
        description="Execution time in milliseconds"
    )
