"""Invoice document

Immutable value objects produced by the invoice generator and frozen into
PaymentReceipt.invoice_data. Not a table: the receipt is the stored record.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class InvoiceKind(str, Enum):
    SUBSCRIPTION = "subscription"
    CREDITS = "credits"


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class CompanyInfo(FrozenModel):
    name: str
    address: List[str] = Field(default_factory=list)
    email: str
    gstin: Optional[str] = None


class CustomerInfo(FrozenModel):
    name: str
    email: str
    organization_name: Optional[str] = None


class InvoiceItem(FrozenModel):
    description: str
    quantity: int
    unit_price: Decimal
    amount: Decimal


class TaxLine(FrozenModel):
    label: str
    rate: Decimal
    amount: Decimal


class DiscountLine(FrozenModel):
    label: str
    amount: Decimal


class InvoiceData(FrozenModel):
    """
    Complete invoice snapshot

    total = subtotal - discount + tax. Tax is only charged on INR payments.
    """

    invoice_number: str
    issued_at: datetime
    kind: InvoiceKind
    company: CompanyInfo
    customer: CustomerInfo
    items: List[InvoiceItem]
    subtotal: Decimal
    discount: Optional[DiscountLine] = None
    tax: Optional[TaxLine] = None
    total: Decimal
    currency: str
    payment_id: str
    payment_method: str = "Razorpay"
    notes: Optional[str] = None
