"""Unit tests for VerifyPayment use case

Tests cover:
- Tampered signatures fail closed before any gateway call or write
- Gateway confirmation (captured status, order match)
- Order notes are authoritative over client-supplied values
- Settlement is delegated with source "verify"
"""

import hashlib
import hmac
import pytest
from unittest.mock import AsyncMock, MagicMock

from libs.result import Return
from src.app.services.payment_gateway import GatewayOrder, GatewayPayment
from src.app.use_cases.payments import SettlementResultDTO, VerifyPayment, VerifyPaymentCommandDTO
from src.domain.payment_receipt import PaymentType

SECRET = "key_secret_test"
ORDER_ID = "order_N1"
PAYMENT_ID = "pay_N1ABCDEFGH"


def sign(order_id: str, payment_id: str, secret: str = SECRET) -> str:
    return hmac.new(secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()


@pytest.fixture
def mock_gateway():
    gateway = MagicMock()
    gateway.fetch_payment = AsyncMock(
        return_value=GatewayPayment(
            id=PAYMENT_ID, order_id=ORDER_ID, amount=22500, currency="INR", status="captured"
        )
    )
    gateway.fetch_order = AsyncMock(
        return_value=GatewayOrder(
            id=ORDER_ID, amount=22500, currency="INR",
            notes={"type": "credits", "organization_id": "org_123", "user_id": "user_1", "credits": "50"},
        )
    )
    return gateway


@pytest.fixture
def mock_settle_payment():
    settle = MagicMock()
    settle.execute = AsyncMock(
        return_value=Return.ok(
            SettlementResultDTO(
                payment_id=PAYMENT_ID,
                organization_id="org_123",
                payment_type="credits",
                amount="225.00",
                currency="INR",
                credits_added=50,
                credits_balance=50,
            )
        )
    )
    return settle


@pytest.fixture
def mock_organization_repo(make_organization):
    repo = MagicMock()
    repo.get_for_user = AsyncMock(return_value=make_organization())
    return repo


@pytest.fixture
def use_case(mock_organization_repo, mock_gateway, mock_settle_payment):
    return VerifyPayment(mock_organization_repo, mock_gateway, mock_settle_payment, key_secret=SECRET)


def command(**fields) -> VerifyPaymentCommandDTO:
    defaults = dict(
        order_id=ORDER_ID,
        payment_id=PAYMENT_ID,
        signature=sign(ORDER_ID, PAYMENT_ID),
        user_id="user_1",
        user_email="owner@example.com",
        expected_type=PaymentType.CREDITS,
        credits=50,
    )
    defaults.update(fields)
    return VerifyPaymentCommandDTO(**defaults)


@pytest.mark.asyncio
class TestVerifyPayment:

    async def test_valid_payment_is_settled(self, use_case, mock_settle_payment):
        result = await use_case.execute(command())

        assert result.is_ok()
        assert result.value.credits_added == 50
        settle_command = mock_settle_payment.execute.call_args.args[0]
        assert settle_command.source == "verify"
        assert settle_command.intent.credits == 50
        assert settle_command.payment.amount == 22500
        assert settle_command.customer_email == "owner@example.com"

    async def test_tampered_signature_does_nothing(self, use_case, mock_gateway, mock_settle_payment):
        """
        Given: A signature computed for a different payment
        When: The client calls verify
        Then: INVALID_SIGNATURE, no gateway lookup and no settlement
        """
        result = await use_case.execute(command(signature=sign(ORDER_ID, "pay_OTHER")))

        assert result.is_err()
        assert result.error.code == "INVALID_SIGNATURE"
        mock_gateway.fetch_payment.assert_not_called()
        mock_settle_payment.execute.assert_not_called()

    async def test_wrong_secret_is_rejected(self, use_case, mock_settle_payment):
        result = await use_case.execute(command(signature=sign(ORDER_ID, PAYMENT_ID, "other")))

        assert result.error.code == "INVALID_SIGNATURE"
        mock_settle_payment.execute.assert_not_called()

    async def test_uncaptured_payment(self, use_case, mock_gateway, mock_settle_payment):
        mock_gateway.fetch_payment = AsyncMock(
            return_value=GatewayPayment(
                id=PAYMENT_ID, order_id=ORDER_ID, amount=22500, currency="INR", status="failed"
            )
        )

        result = await use_case.execute(command())

        assert result.error.code == "PAYMENT_NOT_CAPTURED"
        mock_settle_payment.execute.assert_not_called()

    async def test_payment_of_another_order(self, use_case, mock_gateway, mock_settle_payment):
        mock_gateway.fetch_payment = AsyncMock(
            return_value=GatewayPayment(
                id=PAYMENT_ID, order_id="order_OTHER", amount=22500, currency="INR", status="captured"
            )
        )

        result = await use_case.execute(command())

        assert result.error.code == "VALIDATION_ERROR"
        mock_settle_payment.execute.assert_not_called()

    async def test_client_credits_must_match_the_order(self, use_case, mock_settle_payment):
        result = await use_case.execute(command(credits=500))

        assert result.error.code == "VALIDATION_ERROR"
        mock_settle_payment.execute.assert_not_called()

    async def test_subscription_order_on_credits_endpoint(self, use_case, mock_gateway, mock_settle_payment):
        mock_gateway.fetch_order = AsyncMock(
            return_value=GatewayOrder(
                id=ORDER_ID, amount=49900, currency="INR",
                notes={"type": "subscription", "organization_id": "org_123", "subscription_tier": "individual"},
            )
        )

        result = await use_case.execute(command(credits=None))

        assert result.error.code == "VALIDATION_ERROR"
        mock_settle_payment.execute.assert_not_called()

    async def test_payment_of_another_organization(
        self, use_case, mock_organization_repo, mock_settle_payment, make_organization,
    ):
        mock_organization_repo.get_for_user = AsyncMock(return_value=make_organization(id="org_other"))

        result = await use_case.execute(command())

        assert result.error.code == "FORBIDDEN"
        mock_settle_payment.execute.assert_not_called()
