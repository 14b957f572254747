from .organization_repository import SqlAlchemyOrganizationRepository
from .organization_member_repository import SqlAlchemyOrganizationMemberRepository
from .credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from .payment_receipt_repository import SqlAlchemyPaymentReceiptRepository
from .usage_log_repository import SqlAlchemyUsageLogRepository
from .audit_log_repository import SqlAlchemyAuditLogRepository
from .invitation_repository import SqlAlchemyInvitationRepository

__all__ = [
    "SqlAlchemyOrganizationRepository",
    "SqlAlchemyOrganizationMemberRepository",
    "SqlAlchemyCreditTransactionRepository",
    "SqlAlchemyPaymentReceiptRepository",
    "SqlAlchemyUsageLogRepository",
    "SqlAlchemyAuditLogRepository",
    "SqlAlchemyInvitationRepository",
]
