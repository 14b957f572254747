"""Request schemas for Payment API

Field names accept both snake_case and the camelCase the checkout client
sends (orderId, paymentId, billingInterval, ...).
"""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.domain.organization import BillingInterval, SubscriptionTier
from src.domain.subscription_plan import Currency


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateOrderRequestSchema(CamelModel):
    """
    Request schema for buying a credit pack

    Used for POST /payments/create-order endpoint.
    """

    credits: int = Field(..., gt=0, description="Credits in the pack")
    amount: Decimal = Field(..., description="Pack price in major units")
    currency: Currency = Field(default=Currency.INR)
    description: Optional[str] = Field(default=None, max_length=255)


class CreateSubscriptionRequestSchema(CamelModel):
    tier: SubscriptionTier = Field(..., description="individual, team or enterprise")
    billing_interval: BillingInterval = Field(default=BillingInterval.MONTHLY)
    currency: Currency = Field(default=Currency.INR)


class VerifyPaymentRequestSchema(CamelModel):
    """
    Request schema for the checkout callback

    Used for POST /payments/verify endpoint. credits/amount/currency are what
    the client believes it bought; credits are cross-checked against the order.
    """

    order_id: str = Field(..., min_length=1)
    payment_id: str = Field(..., min_length=1)
    signature: str = Field(..., min_length=1)
    credits: Optional[int] = Field(default=None, gt=0)
    amount: Optional[Decimal] = None
    currency: Optional[str] = None


class VerifySubscriptionRequestSchema(CamelModel):
    order_id: str = Field(..., min_length=1)
    payment_id: str = Field(..., min_length=1)
    signature: str = Field(..., min_length=1)
    tier: Optional[SubscriptionTier] = None
    billing_interval: Optional[BillingInterval] = None


class GenerateInvoiceRequestSchema(CamelModel):
    payment_id: str = Field(..., min_length=1)
    type: Optional[str] = Field(default=None, description="credits or subscription")
