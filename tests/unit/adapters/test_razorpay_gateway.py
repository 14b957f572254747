"""Unit tests for RazorpayGateway using httpx.MockTransport"""

import base64
import json
import httpx
import pytest

from src.adapter.services.razorpay_gateway import RazorpayGateway
from src.app.services.payment_gateway import GatewayRejectedError, GatewayUnavailableError


def gateway_with(handler) -> RazorpayGateway:
    return RazorpayGateway(
        key_id="rzp_test_key",
        key_secret="rzp_test_secret",
        base_url="https://razorpay.test/v1",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
class TestRazorpayGateway:

    async def test_create_order_posts_minor_units_with_basic_auth(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "id": "order_S1",
                    "amount": 22500,
                    "currency": "INR",
                    "receipt": "credits_org_123",
                    "status": "created",
                    "notes": {"organization_id": "org_123", "credits": "50"},
                },
            )

        order = await gateway_with(handler).create_order(
            22500, "INR", "credits_org_123", {"organization_id": "org_123", "credits": "50"}
        )

        assert order.id == "order_S1"
        assert order.amount == 22500
        assert order.notes["credits"] == "50"
        assert seen["method"] == "POST"
        assert seen["url"] == "https://razorpay.test/v1/orders"
        assert seen["body"]["amount"] == 22500
        expected = base64.b64encode(b"rzp_test_key:rzp_test_secret").decode()
        assert seen["auth"] == f"Basic {expected}"

    async def test_fetch_payment_with_empty_notes_list(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/v1/payments/pay_S1"
            return httpx.Response(
                200,
                json={
                    "id": "pay_S1",
                    "order_id": "order_S1",
                    "amount": 22500,
                    "currency": "INR",
                    "status": "captured",
                    "email": "owner@example.com",
                    "notes": [],
                },
            )

        payment = await gateway_with(handler).fetch_payment("pay_S1")

        assert payment.is_settled()
        assert payment.notes == {}
        assert payment.order_id == "order_S1"

    async def test_server_error_is_unavailable(self):
        gateway = gateway_with(lambda request: httpx.Response(503, text="maintenance"))

        with pytest.raises(GatewayUnavailableError):
            await gateway.fetch_order("order_S1")

    async def test_transport_failure_is_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(GatewayUnavailableError):
            await gateway_with(handler).fetch_payment("pay_S1")

    async def test_client_error_carries_description(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                400,
                json={"error": {"code": "BAD_REQUEST_ERROR", "description": "The id provided does not exist"}},
            )

        with pytest.raises(GatewayRejectedError) as exc_info:
            await gateway_with(handler).fetch_payment("pay_missing")

        assert exc_info.value.status_code == 400
        assert "does not exist" in str(exc_info.value)

    async def test_html_page_with_success_status_is_unavailable(self):
        gateway = gateway_with(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

        with pytest.raises(GatewayUnavailableError):
            await gateway.fetch_payment("pay_S1")

    async def test_success_body_without_id_is_unavailable(self):
        gateway = gateway_with(lambda request: httpx.Response(200, json={"amount": 22500}))

        with pytest.raises(GatewayUnavailableError):
            await gateway.create_order(22500, "INR", "credits_org_123", {})

    async def test_client_error_with_list_body(self):
        gateway = gateway_with(lambda request: httpx.Response(400, json=["bad"]))

        with pytest.raises(GatewayRejectedError) as exc_info:
            await gateway.fetch_order("order_S1")

        assert str(exc_info.value) == "HTTP 400"
