from decimal import Decimal
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.auth_provider import HttpAuthProvider
from src.adapter.services.notification_service import create_notification_service
from src.adapter.services.pdf_service import ReportLabPdfService
from src.adapter.services.razorpay_gateway import RazorpayGateway
from src.app.services.auth_provider import AuthProvider
from src.app.services.invoice_generator import InvoiceGenerator
from src.app.services.notification_service import NotificationService
from src.app.services.payment_gateway import PaymentGateway
from src.app.services.pdf_service import PdfService
from src.domain.invoice import CompanyInfo

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


def get_payment_gateway() -> PaymentGateway:
    return RazorpayGateway(
        key_id=ApplicationConfig.RAZORPAY_KEY_ID,
        key_secret=ApplicationConfig.RAZORPAY_KEY_SECRET,
        base_url=ApplicationConfig.RAZORPAY_API_URL,
        timeout=ApplicationConfig.GATEWAY_TIMEOUT_SECONDS,
    )


def get_notification_service() -> NotificationService:
    return create_notification_service(
        resend_api_key=ApplicationConfig.RESEND_API_KEY,
        from_email=ApplicationConfig.EMAIL_FROM,
        reply_to=ApplicationConfig.EMAIL_REPLY_TO,
        site_url=ApplicationConfig.SITE_URL,
        api_url=ApplicationConfig.RESEND_API_URL,
    )


def get_auth_provider() -> AuthProvider:
    return HttpAuthProvider(
        auth_url=ApplicationConfig.AUTH_URL,
        api_key=ApplicationConfig.AUTH_API_KEY,
    )


def get_invoice_generator() -> InvoiceGenerator:
    return InvoiceGenerator(
        company=CompanyInfo(
            name=ApplicationConfig.COMPANY_NAME,
            address=ApplicationConfig.COMPANY_ADDRESS,
            email=ApplicationConfig.COMPANY_EMAIL,
            gstin=ApplicationConfig.COMPANY_GSTIN,
        ),
        gst_rate=Decimal(str(ApplicationConfig.GST_RATE)),
        annual_discount=Decimal(str(ApplicationConfig.ANNUAL_DISCOUNT)),
    )


def get_pdf_service() -> PdfService:
    return ReportLabPdfService()
