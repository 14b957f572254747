"""SettlePayment Use Case

The convergence point of the client verify call, the gateway webhook and
the admin retry. Applies a confirmed payment exactly once and stores its
receipt.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.notification_service import NotificationService
from src.app.repositories.organization_repository import OrganizationRepository
from src.app.repositories.organization_member_repository import OrganizationMemberRepository
from src.app.repositories.payment_receipt_repository import PaymentReceiptRepository
from src.app.use_cases.audit import RecordActivity, UsageEventDTO
from src.app.use_cases.billing.apply_credit_delta import ApplyCreditDelta
from src.app.use_cases.billing.generate_invoice import GenerateInvoice
from src.app.use_cases.billing.dtos import ApplyCreditDeltaCommandDTO, GenerateInvoiceCommandDTO
from src.domain.credit_transaction import TransactionType
from src.domain.invoice import InvoiceData
from src.domain.organization import SubscriptionStatus
from src.domain.payment_receipt import PaymentType
from src.domain.subscription_plan import TIER_ALLOWANCES, add_billing_interval
from .dtos import SettlePaymentCommandDTO, SettlementResultDTO

logger = logging.getLogger(__name__)


class SettlePayment:
    """
    Use Case: Settle a gateway-confirmed payment

    Business Rules:
    1. Credits: the ledger write is keyed on the payment id, so the balance
       moves once no matter how many callers settle the same payment
    2. Subscriptions: the receipt insert (unique payment_id) and the plan
       activation commit together, so the plan is activated once
    3. A receipt that already exists is success, not an error
    4. The receipt email is best-effort and only sent by the caller that
       created the receipt; without an address on the request or the
       payment it goes to the buying member
    5. A first-time settlement is recorded as a usage event; replays are not
    """

    def __init__(
        self,
        uow: UnitOfWork,
        organization_repo: OrganizationRepository,
        receipt_repo: PaymentReceiptRepository,
        apply_credit_delta: ApplyCreditDelta,
        generate_invoice: GenerateInvoice,
        notification_service: NotificationService,
        member_repo: Optional[OrganizationMemberRepository] = None,
        record_activity: Optional[RecordActivity] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.uow = uow
        self.organization_repo = organization_repo
        self.receipt_repo = receipt_repo
        self.apply_credit_delta = apply_credit_delta
        self.generate_invoice = generate_invoice
        self.notification_service = notification_service
        self.member_repo = member_repo
        self.record_activity = record_activity
        self.clock = clock

    async def execute(self, command: SettlePaymentCommandDTO) -> Result[SettlementResultDTO]:
        if command.intent.payment_type == PaymentType.CREDITS:
            return await self._settle_credits(command)
        return await self._settle_subscription(command)

    async def _settle_credits(self, command: SettlePaymentCommandDTO) -> Result[SettlementResultDTO]:
        payment, intent = command.payment, command.intent
        amount = _major_units(payment.amount)

        ledger = await self.apply_credit_delta.execute(
            ApplyCreditDeltaCommandDTO(
                organization_id=intent.organization_id,
                delta=intent.credits,
                transaction_type=TransactionType.PURCHASE,
                amount_paid=amount,
                currency=payment.currency,
                description=f"Purchased {intent.credits} credits",
                idempotency_key=payment.id,
                user_id=intent.user_id,
                details={"order_id": payment.order_id, "source": command.source},
            )
        )
        if ledger.is_err():
            logger.error(
                f"Crediting payment {payment.id} failed ({ledger.error.code}); "
                f"retry with the admin reconcile endpoint"
            )
            return Return.err(ledger.error)

        customer_email = await self._customer_email(command)
        receipt = await self.generate_invoice.execute(
            self._invoice_command(command, amount, customer_email)
        )
        invoice_number: Optional[str] = None
        if receipt.is_err():
            # Credits are applied; the receipt can be regenerated by reconciling again
            logger.error(f"Receipt for payment {payment.id} failed: {receipt.error.message}")
        else:
            invoice_number = receipt.value.invoice_number
            if not receipt.value.already_existed:
                await self._send_receipt(
                    command, InvoiceData.model_validate(receipt.value.invoice)
                )

        already = ledger.value.already_processed
        logger.info(
            f"Payment {payment.id} via {command.source}: "
            f"{'already settled' if already else f'credited {intent.credits}'} "
            f"for organization {intent.organization_id}"
        )
        if not already:
            await self._record_settlement(command, amount, "credits_purchased", {"credits": intent.credits})
        return Return.ok(
            SettlementResultDTO(
                payment_id=payment.id,
                order_id=payment.order_id,
                organization_id=intent.organization_id,
                payment_type=PaymentType.CREDITS.value,
                amount=amount,
                currency=payment.currency,
                transaction_id=ledger.value.transaction_id,
                credits_added=intent.credits,
                credits_balance=ledger.value.balance_after,
                invoice_number=invoice_number,
                already_processed=already,
            )
        )

    async def _settle_subscription(self, command: SettlePaymentCommandDTO) -> Result[SettlementResultDTO]:
        payment, intent = command.payment, command.intent
        amount = _major_units(payment.amount)

        try:
            existing = await self.receipt_repo.get_by_payment_id(payment.id)
            if existing:
                return Return.ok(self._subscription_result(command, amount, existing.invoice_number, True))

            organization = await self.organization_repo.get_by_id(intent.organization_id)
            if not organization:
                return Return.err(
                    Error(
                        code="ORGANIZATION_NOT_FOUND",
                        message=f"Organization {intent.organization_id} not found",
                    )
                )

            customer_email = await self._customer_email(command)
            receipt, invoice = self.generate_invoice.build_receipt(
                self._invoice_command(command, amount, customer_email), organization
            )
            await self.receipt_repo.create(receipt)

            allowance = TIER_ALLOWANCES[intent.subscription_tier]
            now = self.clock()
            organization.subscription_tier = intent.subscription_tier
            organization.subscription_status = SubscriptionStatus.ACTIVE
            organization.billing_interval = intent.billing_interval
            organization.calls_limit = allowance.calls
            organization.storage_limit_mb = allowance.storage_mb
            organization.users_limit = allowance.seats
            organization.calls_used = 0
            organization.current_period_start = now
            organization.current_period_end = add_billing_interval(now, intent.billing_interval)
            await self.organization_repo.update(organization)

            await self.uow.commit()

        except IntegrityError:
            # The receipt insert lost the race; the winner activated the plan
            await self.uow.rollback()
            existing = await self.receipt_repo.get_by_payment_id(payment.id)
            invoice_number = existing.invoice_number if existing else None
            return Return.ok(self._subscription_result(command, amount, invoice_number, True))

        except ValueError as e:
            await self.uow.rollback()
            return Return.err(Error(code="VALIDATION_ERROR", message=str(e)))

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Subscription activation for payment {payment.id} failed: {e}")
            return Return.err(
                Error(
                    code="SETTLE_PAYMENT_FAILED",
                    message="Failed to activate subscription",
                    reason=str(e),
                )
            )

        logger.info(
            f"Payment {payment.id} via {command.source}: activated "
            f"{intent.subscription_tier.value} ({intent.billing_interval.value}) "
            f"for organization {intent.organization_id}"
        )
        await self._send_receipt(command, invoice)
        await self._record_settlement(
            command, amount, "subscription_activated",
            {"tier": intent.subscription_tier.value, "billing_interval": intent.billing_interval.value},
        )
        return Return.ok(self._subscription_result(command, amount, invoice.invoice_number, False))

    def _invoice_command(
        self, command: SettlePaymentCommandDTO, amount: Decimal, customer_email: Optional[str]
    ) -> GenerateInvoiceCommandDTO:
        intent = command.intent
        return GenerateInvoiceCommandDTO(
            organization_id=intent.organization_id,
            user_id=intent.user_id,
            payment_id=command.payment.id,
            order_id=command.payment.order_id,
            payment_type=intent.payment_type.value,
            amount=amount,
            currency=command.payment.currency,
            credits=intent.credits,
            subscription_tier=intent.subscription_tier.value if intent.subscription_tier else None,
            billing_interval=intent.billing_interval.value if intent.subscription_tier else None,
            customer_name=command.customer_name,
            customer_email=customer_email,
        )

    async def _customer_email(self, command: SettlePaymentCommandDTO) -> Optional[str]:
        email = command.customer_email or command.payment.email
        if email or not self.member_repo or not command.intent.user_id:
            return email
        try:
            member = await self.member_repo.get(command.intent.organization_id, command.intent.user_id)
        except Exception as e:
            logger.error(f"Member lookup for payment {command.payment.id} failed: {e}")
            return None
        return member.email if member else None

    async def _record_settlement(
        self, command: SettlePaymentCommandDTO, amount: Decimal, action_type: str, details: dict
    ) -> None:
        if not self.record_activity:
            return
        stored = await self.record_activity.record_usage(
            UsageEventDTO(
                organization_id=command.intent.organization_id,
                user_id=command.intent.user_id,
                action_type=action_type,
                resource_type="payment",
                resource_id=command.payment.id,
                details={
                    **details,
                    "amount": str(amount),
                    "currency": command.payment.currency,
                    "source": command.source,
                },
            )
        )
        if not stored:
            logger.warning(f"Usage event for payment {command.payment.id} was not stored")

    def _subscription_result(
        self, command: SettlePaymentCommandDTO, amount: Decimal,
        invoice_number: Optional[str], already_processed: bool,
    ) -> SettlementResultDTO:
        return SettlementResultDTO(
            payment_id=command.payment.id,
            order_id=command.payment.order_id,
            organization_id=command.intent.organization_id,
            payment_type=PaymentType.SUBSCRIPTION.value,
            amount=amount,
            currency=command.payment.currency,
            subscription_tier=command.intent.subscription_tier.value,
            invoice_number=invoice_number,
            already_processed=already_processed,
        )

    async def _send_receipt(self, command: SettlePaymentCommandDTO, invoice: InvoiceData) -> None:
        to_email = invoice.customer.email
        if not to_email:
            logger.info(f"No email address for payment {command.payment.id}, receipt not sent")
            return
        try:
            sent = await self.notification_service.send_payment_receipt(to_email, invoice)
            if not sent:
                logger.warning(f"Receipt email for {invoice.invoice_number} was not delivered")
        except Exception as e:
            logger.error(f"Receipt email for {invoice.invoice_number} failed: {e}")


def _major_units(amount_minor: int) -> Decimal:
    return (Decimal(amount_minor) / 100).quantize(Decimal("0.01"))
