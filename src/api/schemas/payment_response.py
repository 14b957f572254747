"""Response schemas for Payment and Invoice API (camelCase on the wire)"""

from decimal import Decimal
from typing import Any, Dict, Optional
from pydantic import Field

from src.api.schemas.payment_request import CamelModel


class OrderResponseSchema(CamelModel):
    order_id: str
    amount: int = Field(..., description="Amount in minor units")
    currency: str
    key: str


class VerifyPaymentResponseSchema(CamelModel):
    success: bool = True
    payment_id: str
    transaction_id: Optional[int] = None
    credits_added: Optional[int] = None
    credits_balance: Optional[int] = None
    subscription_tier: Optional[str] = None
    invoice_number: Optional[str] = None
    amount: Decimal
    currency: str
    already_processed: bool = False


class WebhookResponseSchema(CamelModel):
    received: bool = True


class InvoiceResponseSchema(CamelModel):
    invoice_number: str
    payment_id: str
    amount: Decimal
    currency: str
    payment_type: str
    invoice_data: Dict[str, Any]
