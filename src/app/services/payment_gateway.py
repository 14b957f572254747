"""Payment Gateway Interface

Defines the contract for the hosted payment gateway (orders, payments).
Amounts crossing this boundary are in minor units (paise, cents).
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional
from pydantic import BaseModel, Field


class PaymentGatewayError(Exception):
    """Base error for gateway failures"""


class GatewayUnavailableError(PaymentGatewayError):
    """Gateway unreachable, timed out or answered 5xx (retryable)"""


class GatewayRejectedError(PaymentGatewayError):
    """Gateway refused the request (4xx)"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GatewayOrder(BaseModel):
    id: str
    amount: int
    currency: str
    receipt: Optional[str] = None
    status: Optional[str] = None
    notes: Dict[str, str] = Field(default_factory=dict)


class GatewayPayment(BaseModel):
    id: str
    order_id: Optional[str] = None
    amount: int
    currency: str
    status: str
    email: Optional[str] = None
    method: Optional[str] = None
    notes: Dict[str, str] = Field(default_factory=dict)

    def is_settled(self) -> bool:
        return self.status in ("captured", "authorized")


class PaymentGateway(ABC):
    """
    Service interface for the payment gateway

    Implementations raise GatewayUnavailableError for transport failures and
    GatewayRejectedError when the gateway refuses the request.
    """

    @property
    @abstractmethod
    def key_id(self) -> str:
        """Public key handed to the checkout widget"""
        pass

    @abstractmethod
    async def create_order(
        self, amount: int, currency: str, receipt: str, notes: Dict[str, str]
    ) -> GatewayOrder:
        """
        Create an order

        Args:
            amount: Amount in minor units
            currency: ISO currency code
            receipt: Merchant receipt reference
            notes: Metadata stored with the order and returned on fetch

        Returns:
            Created GatewayOrder
        """
        pass

    @abstractmethod
    async def fetch_payment(self, payment_id: str) -> GatewayPayment:
        pass

    @abstractmethod
    async def fetch_order(self, order_id: str) -> GatewayOrder:
        pass
