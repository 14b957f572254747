from .unit_of_work import SqlAlchemyUnitOfWork
from .notification_service import (
    LoggingNotificationService,
    ResendNotificationService,
    CompositeNotificationService,
    create_notification_service,
)
from .razorpay_gateway import RazorpayGateway
from .auth_provider import HttpAuthProvider
from .pdf_service import ReportLabPdfService

__all__ = [
    "SqlAlchemyUnitOfWork",
    "LoggingNotificationService",
    "ResendNotificationService",
    "CompositeNotificationService",
    "create_notification_service",
    "RazorpayGateway",
    "HttpAuthProvider",
    "ReportLabPdfService",
]
