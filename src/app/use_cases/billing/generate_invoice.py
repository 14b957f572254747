"""GenerateInvoice Use Case

Builds the invoice for a settled payment and stores it as an immutable
PaymentReceipt keyed on the gateway payment id.
"""

import logging
from decimal import Decimal
from typing import Optional, Tuple
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.invoice_generator import InvoiceGenerator
from src.app.repositories.organization_repository import OrganizationRepository
from src.app.repositories.payment_receipt_repository import PaymentReceiptRepository
from src.domain.invoice import CustomerInfo, InvoiceData, InvoiceKind
from src.domain.organization import BillingInterval, Organization, SubscriptionTier
from src.domain.payment_receipt import PaymentReceipt, PaymentType, ReceiptStatus
from .dtos import GenerateInvoiceCommandDTO, ReceiptDTO

logger = logging.getLogger(__name__)


class GenerateInvoice:
    """
    Use Case: Persist the receipt of a settled payment

    Business Rules:
    1. At most one receipt per payment_id; an existing receipt is returned
       as-is with already_existed=True
    2. A unique violation on insert means a concurrent caller stored it
       first; treated as success
    3. The invoice snapshot is frozen at creation and never recomputed
    """

    def __init__(
        self,
        uow: UnitOfWork,
        receipt_repo: PaymentReceiptRepository,
        organization_repo: OrganizationRepository,
        invoice_generator: InvoiceGenerator,
    ):
        self.uow = uow
        self.receipt_repo = receipt_repo
        self.organization_repo = organization_repo
        self.invoice_generator = invoice_generator

    async def execute(self, command: GenerateInvoiceCommandDTO) -> Result[ReceiptDTO]:
        try:
            existing = await self.receipt_repo.get_by_payment_id(command.payment_id)
            if existing:
                return Return.ok(receipt_to_dto(existing, already_existed=True))

            organization = await self.organization_repo.get_by_id(command.organization_id)
            if not organization:
                return Return.err(
                    Error(
                        code="ORGANIZATION_NOT_FOUND",
                        message=f"Organization {command.organization_id} not found",
                    )
                )

            receipt, _ = self.build_receipt(command, organization)
            created = await self.receipt_repo.create(receipt)
            await self.uow.commit()

            logger.info(
                f"Receipt {created.invoice_number} stored for payment {command.payment_id}"
            )
            return Return.ok(receipt_to_dto(created))

        except IntegrityError:
            await self.uow.rollback()
            existing = await self.receipt_repo.get_by_payment_id(command.payment_id)
            if existing:
                logger.info(f"Receipt for payment {command.payment_id} stored by a concurrent caller")
                return Return.ok(receipt_to_dto(existing, already_existed=True))
            return Return.err(
                Error(
                    code="GENERATE_INVOICE_FAILED",
                    message="Failed to store receipt",
                    reason="integrity violation without a matching receipt",
                )
            )

        except ValueError as e:
            await self.uow.rollback()
            return Return.err(
                Error(code="VALIDATION_ERROR", message=str(e))
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to generate invoice for payment {command.payment_id}: {e}")
            return Return.err(
                Error(
                    code="GENERATE_INVOICE_FAILED",
                    message="Failed to generate invoice",
                    reason=str(e),
                )
            )

    def build_receipt(
        self, command: GenerateInvoiceCommandDTO, organization: Organization
    ) -> Tuple[PaymentReceipt, InvoiceData]:
        """
        Build (without persisting) the receipt and its invoice

        Raises:
            ValueError: If the payment type or its details are invalid
        """
        payment_type = PaymentType(command.payment_type)
        email = command.customer_email or organization.billing_email or ""
        customer = CustomerInfo(
            name=command.customer_name or email or organization.name,
            email=email,
            organization_name=organization.name,
        )

        invoice = self.invoice_generator.generate(
            kind=InvoiceKind(payment_type.value),
            amount=command.amount,
            currency=command.currency,
            payment_id=command.payment_id,
            customer=customer,
            credits=command.credits,
            tier=_optional_enum(SubscriptionTier, command.subscription_tier),
            billing_interval=_optional_enum(BillingInterval, command.billing_interval),
        )

        details = {}
        if command.credits:
            details["credits"] = command.credits
        if command.subscription_tier:
            details["subscription_tier"] = command.subscription_tier
            details["billing_interval"] = command.billing_interval or BillingInterval.MONTHLY.value

        receipt = PaymentReceipt(
            organization_id=organization.id,
            user_id=command.user_id,
            payment_id=command.payment_id,
            order_id=command.order_id,
            invoice_number=invoice.invoice_number,
            amount=Decimal(command.amount).quantize(Decimal("0.01")),
            currency=invoice.currency,
            payment_type=payment_type,
            status=ReceiptStatus.COMPLETED,
            invoice_data=invoice.model_dump(mode="json"),
            details=details,
        )
        return receipt, invoice


def _optional_enum(enum_cls, value: Optional[str]):
    return enum_cls(value) if value else None


def receipt_to_dto(receipt: PaymentReceipt, already_existed: bool = False) -> ReceiptDTO:
    return ReceiptDTO(
        invoice_number=receipt.invoice_number,
        payment_id=receipt.payment_id,
        order_id=receipt.order_id,
        organization_id=receipt.organization_id,
        amount=receipt.amount,
        currency=receipt.currency,
        payment_type=receipt.payment_type.value,
        status=receipt.status.value,
        invoice=receipt.invoice_data,
        created_at=receipt.created_at,
        already_existed=already_existed,
    )
