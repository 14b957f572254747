"""GetInvoicePdf Use Case"""

from libs.result import Result, Return, Error
from src.app.repositories.organization_member_repository import OrganizationMemberRepository
from src.app.repositories.payment_receipt_repository import PaymentReceiptRepository
from src.app.services.pdf_service import PdfService
from src.domain.invoice import InvoiceData


class GetInvoicePdf:
    """
    Use Case: Render a stored invoice as PDF

    Renders the frozen snapshot; only members of the receipt's organization
    may download it.
    """

    def __init__(
        self,
        receipt_repo: PaymentReceiptRepository,
        member_repo: OrganizationMemberRepository,
        pdf_service: PdfService,
    ):
        self.receipt_repo = receipt_repo
        self.member_repo = member_repo
        self.pdf_service = pdf_service

    async def execute(self, invoice_number: str, user_id: str) -> Result[bytes]:
        receipt = await self.receipt_repo.get_by_invoice_number(invoice_number)
        if not receipt:
            return Return.err(
                Error(code="INVOICE_NOT_FOUND", message=f"Invoice {invoice_number} not found")
            )

        if not await self.member_repo.get(receipt.organization_id, user_id):
            return Return.err(
                Error(code="FORBIDDEN", message="Invoice belongs to another organization")
            )

        try:
            invoice = InvoiceData.model_validate(receipt.invoice_data)
            return Return.ok(self.pdf_service.generate_invoice(invoice))
        except Exception as e:
            return Return.err(
                Error(code="PDF_GENERATION_FAILED", message="Failed to render invoice", reason=str(e))
            )
