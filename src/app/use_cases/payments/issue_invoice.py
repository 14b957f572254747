"""IssueInvoice Use Case

Returns the receipt of a payment, settling the payment first when no
receipt exists yet (the client asks for its invoice before the webhook or
its own verify call finished).
"""

import logging
from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.organization_repository import OrganizationRepository
from src.app.repositories.payment_receipt_repository import PaymentReceiptRepository
from src.app.services.payment_gateway import PaymentGateway, PaymentGatewayError
from src.app.use_cases.billing.dtos import ReceiptDTO
from src.app.use_cases.billing.generate_invoice import receipt_to_dto
from .dtos import PaymentIntent, SettlePaymentCommandDTO
from .errors import gateway_error
from .settle_payment import SettlePayment

logger = logging.getLogger(__name__)


class IssueInvoice:
    """
    Use Case: Get or create the invoice for a payment

    Business Rules:
    1. Only members of the paying organization see the invoice
    2. Amounts always come from the gateway, never from the client
    3. Creating the invoice goes through SettlePayment, so it is as
       idempotent as the verify and webhook paths
    """

    def __init__(
        self,
        organization_repo: OrganizationRepository,
        receipt_repo: PaymentReceiptRepository,
        gateway: PaymentGateway,
        settle_payment: SettlePayment,
    ):
        self.organization_repo = organization_repo
        self.receipt_repo = receipt_repo
        self.gateway = gateway
        self.settle_payment = settle_payment

    async def execute(
        self, payment_id: str, user_id: str, user_email: Optional[str] = None
    ) -> Result[ReceiptDTO]:
        organization = await self.organization_repo.get_for_user(user_id)
        if not organization:
            return Return.err(
                Error(code="ORGANIZATION_NOT_FOUND", message="You are not a member of any organization")
            )

        receipt = await self.receipt_repo.get_by_payment_id(payment_id)
        if receipt:
            if receipt.organization_id != organization.id:
                return Return.err(Error(code="FORBIDDEN", message="Invoice belongs to another organization"))
            return Return.ok(receipt_to_dto(receipt, already_existed=True))

        try:
            payment = await self.gateway.fetch_payment(payment_id)
            if not payment.is_settled():
                return Return.err(
                    Error(code="PAYMENT_NOT_CAPTURED", message=f"Payment is {payment.status}, not captured")
                )
            if not payment.order_id:
                return Return.err(Error(code="VALIDATION_ERROR", message="Payment has no order"))
            order = await self.gateway.fetch_order(payment.order_id)
        except PaymentGatewayError as e:
            return Return.err(gateway_error(e))

        try:
            intent = PaymentIntent.from_notes(order.notes)
        except ValueError as e:
            return Return.err(Error(code="VALIDATION_ERROR", message=str(e)))

        if intent.organization_id != organization.id:
            return Return.err(Error(code="FORBIDDEN", message="Invoice belongs to another organization"))

        settled = await self.settle_payment.execute(
            SettlePaymentCommandDTO(
                payment=payment, intent=intent, source="invoice", customer_email=user_email
            )
        )
        if settled.is_err():
            return Return.err(settled.error)

        receipt = await self.receipt_repo.get_by_payment_id(payment_id)
        if not receipt:
            logger.error(f"Payment {payment_id} settled but no receipt was stored")
            return Return.err(
                Error(code="GENERATE_INVOICE_FAILED", message="Invoice could not be generated")
            )
        return Return.ok(receipt_to_dto(receipt))
