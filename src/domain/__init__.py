from .base import BaseModel, generate_uuid
from .organization import Organization, SubscriptionTier, SubscriptionStatus, BillingInterval
from .organization_member import OrganizationMember, MemberRole
from .credit_transaction import CreditTransaction, TransactionType
from .payment_receipt import PaymentReceipt, PaymentType, ReceiptStatus
from .usage_log import UsageLog
from .audit_log import AuditLog
from .invitation import Invitation
from .invoice import InvoiceData, InvoiceKind

__all__ = [
    "BaseModel",
    "generate_uuid",
    "Organization",
    "SubscriptionTier",
    "SubscriptionStatus",
    "BillingInterval",
    "OrganizationMember",
    "MemberRole",
    "CreditTransaction",
    "TransactionType",
    "PaymentReceipt",
    "PaymentType",
    "ReceiptStatus",
    "UsageLog",
    "AuditLog",
    "Invitation",
    "InvoiceData",
    "InvoiceKind",
]
