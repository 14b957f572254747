"""Admin API Routes

Manual recovery: settle a captured payment that was never credited, and
check the ledger reconciliation invariant on demand.
"""

from fastapi import APIRouter, Depends, Request
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from src.adapter.repositories.organization_repository import SqlAlchemyOrganizationRepository
from src.api.auth import require_admin
from src.api.error import ClientError
from src.api.routes.audit import record_access
from src.api.routes.payments import build_settle_payment
from src.app.services.auth_provider import AuthUser
from src.app.services.invoice_generator import InvoiceGenerator
from src.app.services.notification_service import NotificationService
from src.app.services.payment_gateway import PaymentGateway
from src.app.use_cases.billing.dtos import ReconciliationResultDTO
from src.app.use_cases.billing.reconcile_ledger import ReconcileLedger
from src.app.use_cases.payments import ReconcilePayment, SettlementResultDTO
from src.depends import (
    get_invoice_generator,
    get_notification_service,
    get_payment_gateway,
    get_session,
)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/payments/{payment_id}/reconcile", response_model=SettlementResultDTO)
async def reconcile_payment(
    payment_id: str,
    request: Request,
    admin: AuthUser = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notification_service: NotificationService = Depends(get_notification_service),
    invoice_generator: InvoiceGenerator = Depends(get_invoice_generator),
):
    """Re-run settlement for a payment from the gateway's records. Idempotent."""
    use_case = ReconcilePayment(
        gateway=gateway,
        settle_payment=build_settle_payment(session, notification_service, invoice_generator),
    )
    result = await use_case.execute(payment_id, admin_id=admin.id)
    await record_access(
        session, request, admin,
        action="admin_reconcile_payment",
        resource_type="payment",
        resource_id=payment_id,
        organization_id=result.value.organization_id if result.is_ok() else None,
        details={"outcome": "ok" if result.is_ok() else result.error.code},
    )
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post("/ledger/reconcile", response_model=ReconciliationResultDTO)
async def reconcile_ledger(
    request: Request,
    admin: AuthUser = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    use_case = ReconcileLedger(
        SqlAlchemyOrganizationRepository(session),
        SqlAlchemyCreditTransactionRepository(session),
    )
    result = await use_case.execute()
    await record_access(
        session, request, admin,
        action="admin_reconcile_ledger",
        resource_type="ledger",
        details={"outcome": "ok" if result.is_ok() else result.error.code},
    )
    if result.is_err():
        raise ClientError(result.error)
    return result.value
