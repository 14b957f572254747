from .unit_of_work import UnitOfWork
from .notification_service import NotificationService
from .payment_gateway import (
    PaymentGateway,
    PaymentGatewayError,
    GatewayUnavailableError,
    GatewayRejectedError,
    GatewayOrder,
    GatewayPayment,
)
from .auth_provider import AuthProvider, AuthUser
from .pdf_service import PdfService
from .invoice_generator import InvoiceGenerator

__all__ = [
    "UnitOfWork",
    "NotificationService",
    "PaymentGateway",
    "PaymentGatewayError",
    "GatewayUnavailableError",
    "GatewayRejectedError",
    "GatewayOrder",
    "GatewayPayment",
    "AuthProvider",
    "AuthUser",
    "PdfService",
    "InvoiceGenerator",
]
