from .organization_repository import OrganizationRepository
from .organization_member_repository import OrganizationMemberRepository
from .credit_transaction_repository import CreditTransactionRepository
from .payment_receipt_repository import PaymentReceiptRepository
from .usage_log_repository import UsageLogRepository
from .audit_log_repository import AuditLogRepository
from .invitation_repository import InvitationRepository

__all__ = [
    "OrganizationRepository",
    "OrganizationMemberRepository",
    "CreditTransactionRepository",
    "PaymentReceiptRepository",
    "UsageLogRepository",
    "AuditLogRepository",
    "InvitationRepository",
]
