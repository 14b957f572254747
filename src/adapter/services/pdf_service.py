"""ReportLab PDF Generation Service Implementation

Renders stored invoice snapshots using ReportLab.
"""

from decimal import Decimal
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import (
    SimpleDocTemplate,
    Table,
    TableStyle,
    Paragraph,
    Spacer,
)

from src.app.services.pdf_service import PdfService
from src.domain.invoice import InvoiceData

COLUMN_WIDTHS = [80 * mm, 25 * mm, 30 * mm, 35 * mm]


class ReportLabPdfService(PdfService):
    """
    ReportLab implementation of PdfService

    Lays out company header, bill-to block, line items, discount, tax and
    total exactly as frozen in the invoice document.
    """

    def generate_invoice(self, invoice: InvoiceData) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=20 * mm,
            leftMargin=20 * mm,
            topMargin=20 * mm,
            bottomMargin=20 * mm,
            title=invoice.invoice_number,
        )

        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            "TitleStyle",
            parent=styles["Heading1"],
            fontSize=22,
            spaceAfter=6,
            textColor=colors.HexColor("#1E293B"),
        )
        label_style = ParagraphStyle(
            "LabelStyle",
            parent=styles["Heading2"],
            fontSize=14,
            textColor=colors.HexColor("#2563EB"),
            spaceAfter=16,
        )
        muted_style = ParagraphStyle(
            "MutedStyle",
            parent=styles["Normal"],
            fontSize=9,
            textColor=colors.HexColor("#64748B"),
        )
        normal_style = ParagraphStyle("NormalStyle", parent=styles["Normal"], fontSize=10)
        bold_style = ParagraphStyle(
            "BoldStyle",
            parent=styles["Normal"],
            fontSize=10,
            fontName="Helvetica-Bold",
        )

        money = lambda value: f"{invoice.currency} {Decimal(value):,.2f}"
        company = invoice.company
        elements = [Paragraph(company.name, title_style)]
        for line in company.address:
            elements.append(Paragraph(line, muted_style))
        elements.append(Paragraph(company.email, muted_style))
        if company.gstin:
            elements.append(Paragraph(f"GSTIN: {company.gstin}", muted_style))
        elements.append(Spacer(1, 8 * mm))
        elements.append(Paragraph("TAX INVOICE", label_style))

        details = Table(
            [
                ["Invoice Number:", invoice.invoice_number],
                ["Date:", invoice.issued_at.strftime("%d %b %Y")],
                ["Payment ID:", invoice.payment_id],
                ["Payment Method:", invoice.payment_method],
            ],
            colWidths=[40 * mm, 100 * mm],
        )
        details.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 10),
            ("TEXTCOLOR", (0, 0), (0, -1), colors.HexColor("#64748B")),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ]))
        elements.append(details)
        elements.append(Spacer(1, 8 * mm))

        elements.append(Paragraph("Bill To:", bold_style))
        elements.append(Paragraph(invoice.customer.name, normal_style))
        if invoice.customer.organization_name:
            elements.append(Paragraph(invoice.customer.organization_name, normal_style))
        elements.append(Paragraph(invoice.customer.email, normal_style))
        elements.append(Spacer(1, 8 * mm))

        rows = [["Description", "Quantity", "Unit Price", "Amount"]]
        for item in invoice.items:
            rows.append([item.description, str(item.quantity), money(item.unit_price), money(item.amount)])
        items_table = Table(rows, colWidths=COLUMN_WIDTHS)
        items_table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#1E293B")),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#CBD5E1")),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ("TOPPADDING", (0, 0), (-1, -1), 6),
        ]))
        elements.append(items_table)
        elements.append(Spacer(1, 4 * mm))

        summary = [["", "", "Subtotal:", money(invoice.subtotal)]]
        if invoice.discount:
            summary.append(["", "", invoice.discount.label, f"-{money(invoice.discount.amount)}"])
        if invoice.tax:
            summary.append(["", "", invoice.tax.label, money(invoice.tax.amount)])
        summary.append(["", "", "Total:", money(invoice.total)])
        summary_table = Table(summary, colWidths=COLUMN_WIDTHS)
        summary_table.setStyle(TableStyle([
            ("ALIGN", (2, 0), (-1, -1), "RIGHT"),
            ("FONTNAME", (2, -1), (-1, -1), "Helvetica-Bold"),
            ("LINEABOVE", (2, -1), (-1, -1), 1.5, colors.HexColor("#1E293B")),
            ("TOPPADDING", (0, 0), (-1, -1), 4),
        ]))
        elements.append(summary_table)

        if invoice.notes:
            elements.append(Spacer(1, 12 * mm))
            elements.append(Paragraph(f"<i>{invoice.notes}</i>", muted_style))

        doc.build(elements)
        pdf_bytes = buffer.getvalue()
        buffer.close()

        return pdf_bytes
