"""HandlePaymentWebhook Use Case

Server-to-server notification from the gateway. The recovery path for
payments whose client callback never arrived.
"""

import json
import logging
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.payment_gateway import GatewayPayment, PaymentGateway, PaymentGatewayError
from .dtos import PaymentIntent, SettlePaymentCommandDTO, WebhookResultDTO
from .settle_payment import SettlePayment
from .signatures import verify_webhook_signature

logger = logging.getLogger(__name__)

SETTLING_EVENTS = frozenset({"payment.captured", "payment.authorized", "order.paid"})


class HandlePaymentWebhook:
    """
    Use Case: Process a gateway webhook

    Business Rules:
    1. The signature covers the raw body; anything unsigned is rejected
    2. Only payment.captured, payment.authorized and order.paid settle;
       other events are acknowledged and ignored
    3. Once the signature is valid the webhook is acknowledged even if
       settlement failed; the failure is logged for manual reconciliation
    """

    def __init__(
        self,
        gateway: PaymentGateway,
        settle_payment: SettlePayment,
        webhook_secret: str,
    ):
        self.gateway = gateway
        self.settle_payment = settle_payment
        self.webhook_secret = webhook_secret

    async def execute(self, raw_body: bytes, signature: Optional[str] = None) -> Result[WebhookResultDTO]:
        if not verify_webhook_signature(raw_body, signature, self.webhook_secret):
            logger.warning("SECURITY: webhook with missing or invalid signature rejected")
            return Return.err(
                Error(code="INVALID_SIGNATURE", message="Webhook signature verification failed")
            )

        try:
            body = json.loads(raw_body)
        except ValueError:
            return Return.err(Error(code="VALIDATION_ERROR", message="Webhook body is not JSON"))
        if not isinstance(body, dict):
            return Return.err(Error(code="VALIDATION_ERROR", message="Webhook body is not a JSON object"))

        event = body.get("event")
        if event not in SETTLING_EVENTS:
            logger.info(f"Ignoring webhook event {event}")
            return Return.ok(WebhookResultDTO(event=event))

        entities = body.get("payload") or {}
        payment_entity = (entities.get("payment") or {}).get("entity") or {}
        order_entity = (entities.get("order") or {}).get("entity") or {}
        if not payment_entity.get("id"):
            logger.error(f"Webhook {event} carries no payment entity")
            return Return.ok(WebhookResultDTO(event=event, error_code="VALIDATION_ERROR"))

        payment = GatewayPayment(
            id=payment_entity["id"],
            order_id=payment_entity.get("order_id") or order_entity.get("id"),
            amount=int(payment_entity.get("amount", 0)),
            currency=payment_entity.get("currency", ""),
            status=payment_entity.get("status", ""),
            email=payment_entity.get("email"),
            method=payment_entity.get("method"),
            notes=_notes(payment_entity.get("notes")),
        )
        if not payment.is_settled():
            logger.info(f"Webhook {event} for payment {payment.id} in status {payment.status}, skipped")
            return Return.ok(WebhookResultDTO(event=event, payment_id=payment.id))

        try:
            notes = _notes(order_entity.get("notes"))
            if not notes.get("organization_id"):
                notes = payment.notes
            if not notes.get("organization_id") and payment.order_id:
                notes = (await self.gateway.fetch_order(payment.order_id)).notes
            intent = PaymentIntent.from_notes(notes)
        except PaymentGatewayError as e:
            logger.error(f"Webhook for payment {payment.id}: order lookup failed: {e}")
            return Return.ok(
                WebhookResultDTO(event=event, payment_id=payment.id, error_code="GATEWAY_UNAVAILABLE")
            )
        except ValueError as e:
            logger.error(f"Webhook for payment {payment.id}: unusable order notes: {e}")
            return Return.ok(
                WebhookResultDTO(event=event, payment_id=payment.id, error_code="VALIDATION_ERROR")
            )

        settled = await self.settle_payment.execute(
            SettlePaymentCommandDTO(payment=payment, intent=intent, source="webhook")
        )
        if settled.is_err():
            logger.error(
                f"Webhook settlement of payment {payment.id} failed: "
                f"{settled.error.code} {settled.error.reason or settled.error.message}"
            )
            return Return.ok(
                WebhookResultDTO(event=event, payment_id=payment.id, error_code=settled.error.code)
            )

        return Return.ok(WebhookResultDTO(event=event, payment_id=payment.id, processed=True))


def _notes(raw) -> dict:
    if not isinstance(raw, dict):
        return {}
    return {str(k): str(v) for k, v in raw.items()}
