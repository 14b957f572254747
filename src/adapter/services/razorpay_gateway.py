"""Razorpay Payment Gateway Implementation

Talks to the Razorpay REST API over httpx with HTTP basic auth
(key id / key secret).
"""

import logging
from typing import Any, Dict, Optional
import httpx
from src.app.services.payment_gateway import (
    GatewayOrder,
    GatewayPayment,
    GatewayRejectedError,
    GatewayUnavailableError,
    PaymentGateway,
)

logger = logging.getLogger(__name__)


class RazorpayGateway(PaymentGateway):
    """
    Razorpay implementation of PaymentGateway

    Transport failures, timeouts and 5xx answers raise GatewayUnavailableError;
    4xx answers raise GatewayRejectedError with Razorpay's error description.
    """

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Razorpay gateway

        Args:
            key_id: Razorpay key id (public)
            key_secret: Razorpay key secret
            base_url: API root
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests)
        """
        self._key_id = key_id
        self._key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @property
    def key_id(self) -> str:
        return self._key_id

    async def create_order(
        self, amount: int, currency: str, receipt: str, notes: Dict[str, str]
    ) -> GatewayOrder:
        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes,
        }
        data = await self._request("POST", "/orders", json=payload)
        logger.info(f"Razorpay order {data.get('id')} created for {amount} {currency}")
        return self._to_order(data)

    async def fetch_payment(self, payment_id: str) -> GatewayPayment:
        data = await self._request("GET", f"/payments/{payment_id}")
        return GatewayPayment(
            id=data["id"],
            order_id=data.get("order_id"),
            amount=int(data.get("amount", 0)),
            currency=data.get("currency", ""),
            status=data.get("status", ""),
            email=data.get("email"),
            method=data.get("method"),
            notes=self._notes(data.get("notes")),
        )

    async def fetch_order(self, order_id: str) -> GatewayOrder:
        data = await self._request("GET", f"/orders/{order_id}")
        return self._to_order(data)

    async def _request(self, method: str, path: str, json: Optional[dict] = None) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                auth=(self._key_id, self._key_secret),
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.error(f"Razorpay {method} {path} failed: {e}")
            raise GatewayUnavailableError(f"Payment gateway unreachable: {e}") from e

        if response.status_code >= 500:
            logger.error(f"Razorpay {method} {path} returned {response.status_code}")
            raise GatewayUnavailableError(
                f"Payment gateway error (HTTP {response.status_code})"
            )
        if response.status_code >= 400:
            description = self._error_description(response)
            logger.warning(f"Razorpay {method} {path} rejected: {description}")
            raise GatewayRejectedError(description, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Razorpay {method} {path} returned a non-JSON body")
            raise GatewayUnavailableError("Payment gateway returned an unreadable response") from e
        if not isinstance(data, dict) or not data.get("id"):
            logger.error(f"Razorpay {method} {path} returned no entity id")
            raise GatewayUnavailableError("Payment gateway returned an incomplete response")
        return data

    @staticmethod
    def _error_description(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"HTTP {response.status_code}"
        error = body.get("error") if isinstance(body, dict) else None
        if not isinstance(error, dict):
            return f"HTTP {response.status_code}"
        return error.get("description") or f"HTTP {response.status_code}"

    @staticmethod
    def _notes(raw: Any) -> Dict[str, str]:
        # Razorpay returns [] instead of {} for empty notes
        if not isinstance(raw, dict):
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def _to_order(self, data: Dict[str, Any]) -> GatewayOrder:
        return GatewayOrder(
            id=data["id"],
            amount=int(data.get("amount", 0)),
            currency=data.get("currency", ""),
            receipt=data.get("receipt"),
            status=data.get("status"),
            notes=self._notes(data.get("notes")),
        )
