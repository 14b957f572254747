"""VerifyPayment Use Case

Client callback after checkout: proves the payment with the checkout
signature, confirms it with the gateway and settles it.
"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.organization_repository import OrganizationRepository
from src.app.services.payment_gateway import PaymentGateway, PaymentGatewayError
from .dtos import (
    PaymentIntent,
    SettlePaymentCommandDTO,
    SettlementResultDTO,
    VerifyPaymentCommandDTO,
)
from .errors import gateway_error
from .settle_payment import SettlePayment
from .signatures import verify_payment_signature

logger = logging.getLogger(__name__)


class VerifyPayment:
    """
    Use Case: Verify a payment reported by the client

    Flow:
    1. Check HMAC(order_id|payment_id) against the supplied signature;
       mismatch fails closed before any I/O
    2. Fetch the payment; it must be captured or authorized and belong to
       the order
    3. Fetch the order; its notes are the authoritative intent. Client
       supplied credits must agree with them and the notes' organization
       must be the caller's
    4. Settle (exactly once, shared with the webhook and admin paths)
    """

    def __init__(
        self,
        organization_repo: OrganizationRepository,
        gateway: PaymentGateway,
        settle_payment: SettlePayment,
        key_secret: str,
    ):
        self.organization_repo = organization_repo
        self.gateway = gateway
        self.settle_payment = settle_payment
        self.key_secret = key_secret

    async def execute(self, command: VerifyPaymentCommandDTO) -> Result[SettlementResultDTO]:
        if not verify_payment_signature(
            command.order_id, command.payment_id, command.signature, self.key_secret
        ):
            logger.warning(
                f"SECURITY: invalid payment signature for payment {command.payment_id} "
                f"(order {command.order_id}, user {command.user_id})"
            )
            return Return.err(
                Error(code="INVALID_SIGNATURE", message="Payment signature verification failed")
            )

        try:
            payment = await self.gateway.fetch_payment(command.payment_id)
            if not payment.is_settled():
                return Return.err(
                    Error(
                        code="PAYMENT_NOT_CAPTURED",
                        message=f"Payment is {payment.status}, not captured",
                    )
                )
            if payment.order_id and payment.order_id != command.order_id:
                return Return.err(
                    Error(code="VALIDATION_ERROR", message="Payment does not belong to this order")
                )
            order = await self.gateway.fetch_order(command.order_id)
        except PaymentGatewayError as e:
            logger.error(f"Gateway lookup failed for payment {command.payment_id}: {e}")
            return Return.err(gateway_error(e))

        try:
            intent = PaymentIntent.from_notes(order.notes)
        except ValueError as e:
            logger.error(f"Order {command.order_id} has unusable notes: {e}")
            return Return.err(Error(code="VALIDATION_ERROR", message=str(e)))

        if command.expected_type and intent.payment_type != command.expected_type:
            return Return.err(
                Error(
                    code="VALIDATION_ERROR",
                    message=f"Order is for {intent.payment_type.value}, not {command.expected_type.value}",
                )
            )
        if command.credits is not None and command.credits != intent.credits:
            logger.warning(
                f"Credits mismatch for payment {command.payment_id}: "
                f"client={command.credits}, order={intent.credits}"
            )
            return Return.err(
                Error(code="VALIDATION_ERROR", message="Credits do not match the order")
            )

        organization = await self.organization_repo.get_for_user(command.user_id)
        if not organization or organization.id != intent.organization_id:
            logger.warning(
                f"SECURITY: user {command.user_id} tried to verify payment {command.payment_id} "
                f"of organization {intent.organization_id}"
            )
            return Return.err(
                Error(code="FORBIDDEN", message="Payment belongs to another organization")
            )

        payment.order_id = payment.order_id or command.order_id
        return await self.settle_payment.execute(
            SettlePaymentCommandDTO(
                payment=payment,
                intent=intent,
                source="verify",
                customer_email=command.user_email,
                customer_name=command.user_name,
            )
        )
