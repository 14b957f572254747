"""ReconcilePayment Use Case

Admin retry for a payment that was captured but never settled (lost client
callback and failed webhook).
"""

import logging
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.payment_gateway import PaymentGateway, PaymentGatewayError
from .dtos import PaymentIntent, SettlePaymentCommandDTO, SettlementResultDTO
from .errors import gateway_error
from .settle_payment import SettlePayment

logger = logging.getLogger(__name__)


class ReconcilePayment:

    def __init__(self, gateway: PaymentGateway, settle_payment: SettlePayment):
        self.gateway = gateway
        self.settle_payment = settle_payment

    async def execute(self, payment_id: str, admin_id: Optional[str] = None) -> Result[SettlementResultDTO]:
        """
        Re-run settlement from the gateway's own records

        Safe to repeat: settlement is keyed on the payment id.
        """
        try:
            payment = await self.gateway.fetch_payment(payment_id)
            if not payment.is_settled():
                return Return.err(
                    Error(
                        code="PAYMENT_NOT_CAPTURED",
                        message=f"Payment is {payment.status}, not captured",
                    )
                )
            if not payment.order_id:
                return Return.err(
                    Error(code="VALIDATION_ERROR", message="Payment has no order")
                )
            order = await self.gateway.fetch_order(payment.order_id)
        except PaymentGatewayError as e:
            return Return.err(gateway_error(e))

        try:
            intent = PaymentIntent.from_notes(order.notes)
        except ValueError as e:
            return Return.err(Error(code="VALIDATION_ERROR", message=str(e)))

        logger.info(f"Admin {admin_id} reconciling payment {payment_id}")
        return await self.settle_payment.execute(
            SettlePaymentCommandDTO(payment=payment, intent=intent, source="admin")
        )
