"""Invoice Generator

Pure construction of invoice documents from a settled payment. No I/O: the
same inputs and clock always produce the same InvoiceData.
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from src.domain.invoice import (
    CompanyInfo,
    CustomerInfo,
    DiscountLine,
    InvoiceData,
    InvoiceItem,
    InvoiceKind,
    TaxLine,
)
from src.domain.organization import BillingInterval, SubscriptionTier
from src.domain.subscription_plan import Currency, DEFAULT_ANNUAL_DISCOUNT, round_half_up

CENTS = "0.01"

INVOICE_NOTES = (
    "Thank you for your business. This is a computer generated invoice "
    "and does not require a signature."
)


def invoice_number_for(payment_id: str, issued_at: datetime) -> str:
    """INV-{YYYY}{MM}-{last 8 characters of the payment id, upper-cased}"""
    return f"INV-{issued_at:%Y%m}-{payment_id[-8:].upper()}"


class InvoiceGenerator:
    """
    Builds InvoiceData for credit packs and subscriptions

    Rules:
    - GST is charged on INR payments only, rounded half-up to whole rupees
    - Annual subscriptions show the undiscounted price and a discount line;
      tax is charged on the discounted amount actually paid
    - total = subtotal - discount + tax
    """

    def __init__(
        self,
        company: CompanyInfo,
        gst_rate: Decimal = Decimal("18"),
        annual_discount: Decimal = DEFAULT_ANNUAL_DISCOUNT,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.company = company
        self.gst_rate = Decimal(str(gst_rate))
        self.annual_discount = Decimal(str(annual_discount))
        self.clock = clock

    def generate(
        self,
        kind: InvoiceKind,
        amount: Decimal,
        currency: str,
        payment_id: str,
        customer: CustomerInfo,
        credits: Optional[int] = None,
        tier: Optional[SubscriptionTier] = None,
        billing_interval: Optional[BillingInterval] = None,
        issued_at: Optional[datetime] = None,
    ) -> InvoiceData:
        """
        Build the invoice for one payment

        Args:
            kind: credits or subscription
            amount: Amount paid in major units (before tax)
            currency: ISO currency code
            payment_id: Gateway payment id (source of the invoice number)
            customer: Bill-to details
            credits: Credits bought (credits invoices)
            tier: Plan bought (subscription invoices)
            billing_interval: monthly or annual (subscription invoices)
            issued_at: Issue timestamp, defaults to the injected clock

        Returns:
            Frozen InvoiceData

        Raises:
            ValueError: If the kind-specific arguments are missing
        """
        issued = issued_at or self.clock()
        paid = Decimal(str(amount)).quantize(Decimal(CENTS))
        discount: Optional[DiscountLine] = None

        if kind == InvoiceKind.CREDITS:
            if not credits or credits <= 0:
                raise ValueError("credits invoice requires a positive credits count")
            subtotal = paid
            items = [
                InvoiceItem(
                    description=f"{credits} Analysis Credits",
                    quantity=credits,
                    unit_price=(paid / credits).quantize(Decimal(CENTS)),
                    amount=paid,
                )
            ]
        else:
            if tier is None:
                raise ValueError("subscription invoice requires a tier")
            interval = billing_interval or BillingInterval.MONTHLY
            if interval == BillingInterval.ANNUAL:
                subtotal = round_half_up(paid / (Decimal(1) - self.annual_discount)).quantize(Decimal(CENTS))
                discount = DiscountLine(
                    label=f"Annual billing discount ({int(self.annual_discount * 100)}%)",
                    amount=subtotal - paid,
                )
            else:
                subtotal = paid
            items = [
                InvoiceItem(
                    description=f"{tier.value.capitalize()} Plan ({interval.value.capitalize()})",
                    quantity=1,
                    unit_price=subtotal,
                    amount=subtotal,
                )
            ]

        taxable = subtotal - (discount.amount if discount else Decimal(0))
        tax: Optional[TaxLine] = None
        if currency.upper() == Currency.INR.value:
            tax = TaxLine(
                label=f"GST ({self.gst_rate.normalize():f}%)",
                rate=self.gst_rate,
                amount=round_half_up(taxable * self.gst_rate / 100).quantize(Decimal(CENTS)),
            )

        total = (taxable + (tax.amount if tax else Decimal(0))).quantize(Decimal(CENTS))

        return InvoiceData(
            invoice_number=invoice_number_for(payment_id, issued),
            issued_at=issued,
            kind=kind,
            company=self.company,
            customer=customer,
            items=items,
            subtotal=subtotal,
            discount=discount,
            tax=tax,
            total=total,
            currency=currency.upper(),
            payment_id=payment_id,
            notes=INVOICE_NOTES,
        )
