"""PDF Generation Service Interface

Defines the contract for PDF generation operations.
"""

from abc import ABC, abstractmethod
from src.domain.invoice import InvoiceData


class PdfService(ABC):
    """
    Service interface for PDF generation

    Renders a stored invoice snapshot; never recomputes amounts.
    """

    @abstractmethod
    def generate_invoice(self, invoice: InvoiceData) -> bytes:
        """
        Render an invoice PDF

        Args:
            invoice: Frozen invoice document

        Returns:
            PDF document as bytes
        """
        pass
