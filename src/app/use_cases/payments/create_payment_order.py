"""CreatePaymentOrder Use Case

Registers a gateway order for a credit pack or a subscription. The order
notes pin what is being bought for whom; they are written in the same
gateway call that creates the order.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable
from libs.result import Result, Return, Error
from src.app.repositories.organization_repository import OrganizationRepository
from src.app.services.payment_gateway import PaymentGateway, PaymentGatewayError
from src.domain.payment_receipt import PaymentType
from src.domain.subscription_plan import (
    CREDIT_PACKAGES,
    DEFAULT_ANNUAL_DISCOUNT,
    MIN_AMOUNT,
    PURCHASABLE_TIERS,
    subscription_price,
    to_minor_units,
)
from .dtos import CreateOrderCommandDTO, OrderResponseDTO, PaymentIntent
from .errors import gateway_error

logger = logging.getLogger(__name__)


def _validation_error(message: str) -> Error:
    return Error(code="VALIDATION_ERROR", message=message)


class CreatePaymentOrder:
    """
    Use Case: Create a payment order

    Business Rules:
    1. Caller must belong to an organization
    2. Credit orders must match a listed credit pack at its listed price
    3. Subscription amounts come from the tier table; annual billing is
       twelve discounted months
    4. Amounts below the currency minimum are rejected without calling the
       gateway
    5. Minor units are rounded half-up, never truncated
    """

    def __init__(
        self,
        organization_repo: OrganizationRepository,
        gateway: PaymentGateway,
        annual_discount: Decimal = DEFAULT_ANNUAL_DISCOUNT,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.organization_repo = organization_repo
        self.gateway = gateway
        self.annual_discount = annual_discount
        self.clock = clock

    async def execute(self, command: CreateOrderCommandDTO) -> Result[OrderResponseDTO]:
        organization = await self.organization_repo.get_for_user(command.user_id)
        if not organization:
            return Return.err(
                Error(
                    code="ORGANIZATION_NOT_FOUND",
                    message="You are not a member of any organization",
                )
            )

        if command.payment_type == PaymentType.CREDITS:
            if not command.credits or command.credits <= 0:
                return Return.err(_validation_error("credits must be a positive integer"))
            if command.amount is None:
                return Return.err(_validation_error("amount is required"))
            amount = Decimal(command.amount)
            description = command.description or f"Purchase {command.credits} analysis credits"
        else:
            if command.subscription_tier not in PURCHASABLE_TIERS:
                return Return.err(_validation_error("subscription tier must be individual, team or enterprise"))
            amount = subscription_price(
                command.subscription_tier,
                command.billing_interval,
                command.currency,
                self.annual_discount,
            )
            description = command.description or (
                f"{command.subscription_tier.value.capitalize()} plan "
                f"({command.billing_interval.value})"
            )

        minimum = MIN_AMOUNT[command.currency]
        if amount < minimum:
            return Return.err(
                _validation_error(f"Minimum amount is {minimum} {command.currency.value}")
            )

        if command.payment_type == PaymentType.CREDITS:
            package = next((p for p in CREDIT_PACKAGES if p.credits == command.credits), None)
            if package is None or package.price(command.currency) != amount:
                return Return.err(
                    _validation_error(f"No {command.credits}-credit pack at {amount} {command.currency.value}")
                )

        intent = PaymentIntent(
            payment_type=command.payment_type,
            organization_id=organization.id,
            user_id=command.user_id,
            credits=command.credits if command.payment_type == PaymentType.CREDITS else None,
            subscription_tier=command.subscription_tier if command.payment_type == PaymentType.SUBSCRIPTION else None,
            billing_interval=command.billing_interval,
            description=description,
        )

        timestamp = int(self.clock().timestamp() * 1000)
        if command.payment_type == PaymentType.CREDITS:
            receipt = f"credits_{command.credits}_{timestamp}"
        else:
            receipt = f"sub_{command.subscription_tier.value}_{timestamp}"

        amount_minor = to_minor_units(amount)
        try:
            order = await self.gateway.create_order(
                amount=amount_minor,
                currency=command.currency.value,
                receipt=receipt,
                notes=intent.to_notes(),
            )
        except PaymentGatewayError as e:
            logger.error(f"Order creation failed for organization {organization.id}: {e}")
            return Return.err(gateway_error(e))

        logger.info(
            f"Created {command.payment_type.value} order {order.id} for organization "
            f"{organization.id}: {amount_minor} {command.currency.value} (minor units)"
        )
        return Return.ok(
            OrderResponseDTO(
                order_id=order.id,
                amount=order.amount or amount_minor,
                currency=order.currency or command.currency.value,
                key=self.gateway.key_id,
            )
        )
