from datetime import datetime
from decimal import Decimal

from src.adapter.services.pdf_service import ReportLabPdfService
from src.app.services.invoice_generator import InvoiceGenerator
from src.domain.invoice import CompanyInfo, CustomerInfo, InvoiceKind


def test_renders_pdf_document():
    generator = InvoiceGenerator(
        company=CompanyInfo(name="Audiolyse Technologies", email="billing@audiolyse.com"),
        clock=lambda: datetime(2026, 3, 10),
    )
    invoice = generator.generate(
        kind=InvoiceKind.CREDITS,
        amount=Decimal("225"),
        currency="INR",
        payment_id="pay_S1ABCDEFGH",
        customer=CustomerInfo(name="Acme Calls", email="owner@example.com"),
        credits=50,
    )

    pdf = ReportLabPdfService().generate_invoice(invoice)

    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000
