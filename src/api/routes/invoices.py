"""Invoice API Routes"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import Response
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.organization_member_repository import SqlAlchemyOrganizationMemberRepository
from src.adapter.repositories.organization_repository import SqlAlchemyOrganizationRepository
from src.adapter.repositories.payment_receipt_repository import SqlAlchemyPaymentReceiptRepository
from src.api.auth import get_current_user
from src.api.error import ClientError
from src.api.routes.audit import record_access
from src.api.routes.payments import build_settle_payment
from src.api.schemas.payment_request import GenerateInvoiceRequestSchema
from src.api.schemas.payment_response import InvoiceResponseSchema
from src.app.services.auth_provider import AuthUser
from src.app.services.invoice_generator import InvoiceGenerator
from src.app.services.notification_service import NotificationService
from src.app.services.payment_gateway import PaymentGateway
from src.app.services.pdf_service import PdfService
from src.app.use_cases.billing.get_invoice_pdf import GetInvoicePdf
from src.app.use_cases.payments.issue_invoice import IssueInvoice
from src.depends import (
    get_invoice_generator,
    get_notification_service,
    get_payment_gateway,
    get_pdf_service,
    get_session,
)

router = APIRouter(prefix="/invoice", tags=["Invoices"])


@router.post(
    "/generate",
    response_model=InvoiceResponseSchema,
    status_code=status.HTTP_200_OK,
    responses={
        404: {
            "description": "Caller has no organization",
            "content": {
                "application/json": {
                    "example": {"error": {"code": "ORGANIZATION_NOT_FOUND", "message": "You are not a member of any organization"}}
                }
            }
        },
        402: {"description": "Payment not captured"},
    }
)
async def generate_invoice(
    request: GenerateInvoiceRequestSchema,
    user: AuthUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notification_service: NotificationService = Depends(get_notification_service),
    invoice_generator: InvoiceGenerator = Depends(get_invoice_generator),
):
    """
    Return the invoice for a payment, creating it if the payment has not
    been settled yet. Amounts are always taken from the gateway.

    **Returns:** `{invoiceNumber, paymentId, amount, currency, paymentType, invoiceData}`
    """
    use_case = IssueInvoice(
        organization_repo=SqlAlchemyOrganizationRepository(session),
        receipt_repo=SqlAlchemyPaymentReceiptRepository(session),
        gateway=gateway,
        settle_payment=build_settle_payment(session, notification_service, invoice_generator),
    )
    result = await use_case.execute(request.payment_id, user.id, user.email)
    if result.is_err():
        raise ClientError(result.error)

    receipt = result.value
    return InvoiceResponseSchema(
        invoice_number=receipt.invoice_number,
        payment_id=receipt.payment_id,
        amount=receipt.amount,
        currency=receipt.currency,
        payment_type=receipt.payment_type,
        invoice_data=receipt.invoice,
    )


@router.get(
    "/{invoice_number}/pdf",
    response_class=Response,
    responses={
        200: {"content": {"application/pdf": {}}, "description": "Invoice PDF"},
        404: {"description": "Invoice not found"},
        403: {"description": "Invoice belongs to another organization"},
    }
)
async def get_invoice_pdf(
    invoice_number: str,
    request: Request,
    user: AuthUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    pdf_service: PdfService = Depends(get_pdf_service),
):
    """Download a stored invoice as PDF."""
    use_case = GetInvoicePdf(
        receipt_repo=SqlAlchemyPaymentReceiptRepository(session),
        member_repo=SqlAlchemyOrganizationMemberRepository(session),
        pdf_service=pdf_service,
    )
    result = await use_case.execute(invoice_number, user.id)
    if result.is_err():
        raise ClientError(result.error)

    organization = await SqlAlchemyOrganizationRepository(session).get_for_user(user.id)
    await record_access(
        session, request, user,
        action="invoice_downloaded",
        resource_type="invoice",
        resource_id=invoice_number,
        organization_id=organization.id if organization else None,
    )

    return Response(
        content=result.value,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{invoice_number}.pdf"'},
    )
