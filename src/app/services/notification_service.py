"""Notification Service Interface

Defines the contract for transactional email (receipts, invitations).
"""

from abc import ABC, abstractmethod
from src.domain.invoice import InvoiceData


class NotificationService(ABC):
    """
    Abstract notification service for transactional messages

    Sending is best-effort: implementations report failure by returning
    False and callers never let it affect a payment outcome.
    """

    @abstractmethod
    async def send_payment_receipt(self, to_email: str, invoice: InvoiceData) -> bool:
        """
        Send a payment receipt

        Args:
            to_email: Recipient address
            invoice: Invoice snapshot to summarize

        Returns:
            True if the message was accepted, False otherwise
        """
        pass

    @abstractmethod
    async def send_invitation(
        self, to_email: str, organization_name: str, inviter_email: str, token: str
    ) -> bool:
        pass
