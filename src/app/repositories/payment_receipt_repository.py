"""Payment Receipt Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.payment_receipt import PaymentReceipt


class PaymentReceiptRepository(ABC):
    """
    Repository interface for PaymentReceipt persistence

    payment_id is unique; a second insert for the same payment raises
    IntegrityError, which callers treat as "already settled".
    """

    @abstractmethod
    async def create(self, receipt: PaymentReceipt) -> PaymentReceipt:
        """
        Raises:
            IntegrityError: If a receipt for the payment_id already exists
        """
        pass

    @abstractmethod
    async def get_by_payment_id(self, payment_id: str) -> Optional[PaymentReceipt]:
        pass

    @abstractmethod
    async def get_by_invoice_number(self, invoice_number: str) -> Optional[PaymentReceipt]:
        pass
