"""Notification Service Implementations

Provides concrete implementations for sending transactional email.
"""

import logging
from typing import Optional
import httpx
from src.app.services.notification_service import NotificationService
from src.domain.invoice import InvoiceData

logger = logging.getLogger(__name__)


def _format_money(currency: str, amount) -> str:
    symbol = "₹" if currency == "INR" else "$"
    return f"{symbol}{amount:,.2f}"


class LoggingNotificationService(NotificationService):
    """
    Notification service that logs messages

    Useful for development and testing, or when no email provider is configured.
    """

    async def send_payment_receipt(self, to_email: str, invoice: InvoiceData) -> bool:
        logger.info(
            f"[RECEIPT] To: {to_email}, Invoice: {invoice.invoice_number}, "
            f"Total: {_format_money(invoice.currency, invoice.total)}"
        )
        return True

    async def send_invitation(
        self, to_email: str, organization_name: str, inviter_email: str, token: str
    ) -> bool:
        logger.info(
            f"[INVITATION] To: {to_email}, Organization: {organization_name}, "
            f"Invited by: {inviter_email}"
        )
        return True


class ResendNotificationService(NotificationService):
    """
    Notification service that sends email through the Resend API

    POSTs to {api_url}/emails with a bearer API key.
    """

    def __init__(
        self,
        api_key: str,
        from_email: str,
        reply_to: Optional[str] = None,
        site_url: str = "",
        api_url: str = "https://api.resend.com",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.from_email = from_email
        self.reply_to = reply_to
        self.site_url = site_url.rstrip("/")
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def send_payment_receipt(self, to_email: str, invoice: InvoiceData) -> bool:
        rows = "".join(
            f"<tr><td>{item.description}</td>"
            f"<td>{_format_money(invoice.currency, item.amount)}</td></tr>"
            for item in invoice.items
        )
        if invoice.discount:
            rows += (
                f"<tr><td>{invoice.discount.label}</td>"
                f"<td>-{_format_money(invoice.currency, invoice.discount.amount)}</td></tr>"
            )
        if invoice.tax:
            rows += (
                f"<tr><td>{invoice.tax.label}</td>"
                f"<td>{_format_money(invoice.currency, invoice.tax.amount)}</td></tr>"
            )
        html = (
            f"<h2>Payment received</h2>"
            f"<p>Invoice <strong>{invoice.invoice_number}</strong> "
            f"dated {invoice.issued_at:%d %b %Y}.</p>"
            f"<table>{rows}<tr><td><strong>Total</strong></td>"
            f"<td><strong>{_format_money(invoice.currency, invoice.total)}</strong></td></tr></table>"
            f"<p>Payment ID: {invoice.payment_id}</p>"
        )
        return await self._send(
            to_email,
            f"Payment receipt {invoice.invoice_number}",
            html,
        )

    async def send_invitation(
        self, to_email: str, organization_name: str, inviter_email: str, token: str
    ) -> bool:
        link = f"{self.site_url}/invite/{token}"
        html = (
            f"<p>{inviter_email} invited you to join <strong>{organization_name}</strong>.</p>"
            f"<p><a href=\"{link}\">Accept invitation</a></p>"
        )
        return await self._send(to_email, f"You're invited to join {organization_name}", html)

    async def _send(self, to_email: str, subject: str, html: str) -> bool:
        payload = {
            "from": self.from_email,
            "to": [to_email],
            "subject": subject,
            "html": html,
        }
        if self.reply_to:
            payload["reply_to"] = self.reply_to

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    f"{self.api_url}/emails",
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                response.raise_for_status()
                logger.info(f"Email '{subject}' sent to {to_email}")
                return True
        except httpx.HTTPError as e:
            logger.error(f"Failed to send email '{subject}' to {to_email}: {e}")
            return False


class CompositeNotificationService(NotificationService):
    """
    Notification service that delegates to multiple services

    Useful for sending to multiple channels (e.g., log + email).
    """

    def __init__(self, services: list[NotificationService]):
        self.services = services

    async def send_payment_receipt(self, to_email: str, invoice: InvoiceData) -> bool:
        success = False
        for service in self.services:
            try:
                if await service.send_payment_receipt(to_email, invoice):
                    success = True
            except Exception as e:
                logger.error(f"Notification service {type(service).__name__} failed: {e}")
        return success

    async def send_invitation(
        self, to_email: str, organization_name: str, inviter_email: str, token: str
    ) -> bool:
        success = False
        for service in self.services:
            try:
                if await service.send_invitation(to_email, organization_name, inviter_email, token):
                    success = True
            except Exception as e:
                logger.error(f"Notification service {type(service).__name__} failed: {e}")
        return success


def create_notification_service(
    resend_api_key: Optional[str] = None,
    from_email: str = "",
    reply_to: Optional[str] = None,
    site_url: str = "",
    api_url: str = "https://api.resend.com",
) -> NotificationService:
    """
    Factory function to create appropriate notification service

    Args:
        resend_api_key: Optional Resend API key. If provided, creates composite
                        service with logging + Resend. Otherwise, just logging.

    Returns:
        Configured NotificationService
    """
    services: list[NotificationService] = [LoggingNotificationService()]

    if resend_api_key:
        services.append(ResendNotificationService(
            api_key=resend_api_key,
            from_email=from_email,
            reply_to=reply_to,
            site_url=site_url,
            api_url=api_url,
        ))

    if len(services) == 1:
        return services[0]

    return CompositeNotificationService(services)
