"""Data Transfer Objects for Payment Use Cases"""

from decimal import Decimal
from typing import Dict, Optional
from pydantic import BaseModel, Field

from src.app.services.payment_gateway import GatewayPayment
from src.domain.organization import BillingInterval, SubscriptionTier
from src.domain.payment_receipt import PaymentType
from src.domain.subscription_plan import Currency, PURCHASABLE_TIERS


class PaymentIntent(BaseModel):
    """
    What a gateway order was created for

    Read back from the order notes at settlement time; the notes are the only
    record of intent between order creation and verification.
    """

    payment_type: PaymentType
    organization_id: str
    user_id: Optional[str] = None
    credits: Optional[int] = None
    subscription_tier: Optional[SubscriptionTier] = None
    billing_interval: BillingInterval = BillingInterval.MONTHLY
    description: Optional[str] = None

    def to_notes(self) -> Dict[str, str]:
        notes = {
            "type": self.payment_type.value,
            "organization_id": self.organization_id,
        }
        if self.user_id:
            notes["user_id"] = self.user_id
        if self.description:
            notes["description"] = self.description
        if self.payment_type == PaymentType.CREDITS:
            notes["credits"] = str(self.credits)
        else:
            notes["subscription_tier"] = self.subscription_tier.value
            notes["billing_interval"] = self.billing_interval.value
        return notes

    @classmethod
    def from_notes(cls, notes: Dict[str, str]) -> "PaymentIntent":
        """
        Parse order notes

        Raises:
            ValueError: If the notes do not describe a payable intent
        """
        organization_id = notes.get("organization_id")
        if not organization_id:
            raise ValueError("order notes carry no organization_id")

        kind = notes.get("type") or ("credits" if notes.get("credits") else None)
        if kind == PaymentType.SUBSCRIPTION.value:
            tier = SubscriptionTier(notes.get("subscription_tier", ""))
            if tier not in PURCHASABLE_TIERS:
                raise ValueError(f"tier {tier.value} cannot be purchased")
            return cls(
                payment_type=PaymentType.SUBSCRIPTION,
                organization_id=organization_id,
                user_id=notes.get("user_id"),
                subscription_tier=tier,
                billing_interval=BillingInterval(notes.get("billing_interval") or "monthly"),
                description=notes.get("description"),
            )

        if kind == PaymentType.CREDITS.value:
            try:
                credits = int(notes.get("credits", ""))
            except ValueError:
                raise ValueError("order notes carry no valid credits count")
            if credits <= 0:
                raise ValueError("order notes carry no valid credits count")
            return cls(
                payment_type=PaymentType.CREDITS,
                organization_id=organization_id,
                user_id=notes.get("user_id"),
                credits=credits,
                description=notes.get("description"),
            )

        raise ValueError(f"unknown payment type {kind!r}")


class CreateOrderCommandDTO(BaseModel):
    user_id: str
    payment_type: PaymentType
    currency: Currency = Currency.INR
    credits: Optional[int] = None
    amount: Optional[Decimal] = None
    subscription_tier: Optional[SubscriptionTier] = None
    billing_interval: BillingInterval = BillingInterval.MONTHLY
    description: Optional[str] = None


class OrderResponseDTO(BaseModel):
    order_id: str
    amount: int = Field(..., description="Amount in minor units")
    currency: str
    key: str = Field(..., description="Gateway public key for the checkout widget")


class VerifyPaymentCommandDTO(BaseModel):
    order_id: str
    payment_id: str
    signature: str
    user_id: str
    user_email: Optional[str] = None
    user_name: Optional[str] = None
    expected_type: Optional[PaymentType] = None
    credits: Optional[int] = None
    amount: Optional[Decimal] = None
    currency: Optional[str] = None


class SettlePaymentCommandDTO(BaseModel):
    payment: GatewayPayment
    intent: PaymentIntent
    source: str = Field(..., description="verify, webhook or admin")
    customer_email: Optional[str] = None
    customer_name: Optional[str] = None


class SettlementResultDTO(BaseModel):
    """
    Outcome of settling one payment

    already_processed is True when another entry point settled the payment
    first; the rest of the payload is the same either way.
    """

    success: bool = True
    payment_id: str
    order_id: Optional[str] = None
    organization_id: str
    payment_type: str
    amount: Decimal
    currency: str
    transaction_id: Optional[int] = None
    credits_added: Optional[int] = None
    credits_balance: Optional[int] = None
    subscription_tier: Optional[str] = None
    invoice_number: Optional[str] = None
    already_processed: bool = False


class WebhookResultDTO(BaseModel):
    received: bool = True
    event: Optional[str] = None
    processed: bool = False
    payment_id: Optional[str] = None
    error_code: Optional[str] = None
