"""Payment use cases"""
from .create_payment_order import CreatePaymentOrder
from .settle_payment import SettlePayment
from .verify_payment import VerifyPayment
from .handle_payment_webhook import HandlePaymentWebhook
from .reconcile_payment import ReconcilePayment
from .issue_invoice import IssueInvoice
from .dtos import (
    PaymentIntent,
    CreateOrderCommandDTO,
    OrderResponseDTO,
    VerifyPaymentCommandDTO,
    SettlePaymentCommandDTO,
    SettlementResultDTO,
    WebhookResultDTO,
)

__all__ = [
    "CreatePaymentOrder",
    "SettlePayment",
    "VerifyPayment",
    "HandlePaymentWebhook",
    "ReconcilePayment",
    "IssueInvoice",
    "PaymentIntent",
    "CreateOrderCommandDTO",
    "OrderResponseDTO",
    "VerifyPaymentCommandDTO",
    "SettlePaymentCommandDTO",
    "SettlementResultDTO",
    "WebhookResultDTO",
]
