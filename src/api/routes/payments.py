"""Payment API Routes

FastAPI routes for order creation, checkout verification and the gateway
webhook.
"""

from decimal import Decimal
from fastapi import APIRouter, Depends, Header, Request, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from src.adapter.repositories.audit_log_repository import SqlAlchemyAuditLogRepository
from src.adapter.repositories.organization_repository import SqlAlchemyOrganizationRepository
from src.adapter.repositories.organization_member_repository import SqlAlchemyOrganizationMemberRepository
from src.adapter.repositories.payment_receipt_repository import SqlAlchemyPaymentReceiptRepository
from src.adapter.repositories.usage_log_repository import SqlAlchemyUsageLogRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.auth import get_current_user
from src.api.error import ClientError
from src.api.schemas.payment_request import (
    CreateOrderRequestSchema,
    CreateSubscriptionRequestSchema,
    VerifyPaymentRequestSchema,
    VerifySubscriptionRequestSchema,
)
from src.api.schemas.payment_response import (
    OrderResponseSchema,
    VerifyPaymentResponseSchema,
    WebhookResponseSchema,
)
from src.app.services.auth_provider import AuthUser
from src.app.services.invoice_generator import InvoiceGenerator
from src.app.services.notification_service import NotificationService
from src.app.services.payment_gateway import PaymentGateway
from src.app.use_cases.audit import RecordActivity
from src.app.use_cases.billing.apply_credit_delta import ApplyCreditDelta
from src.app.use_cases.billing.generate_invoice import GenerateInvoice
from src.app.use_cases.payments import (
    CreateOrderCommandDTO,
    CreatePaymentOrder,
    HandlePaymentWebhook,
    SettlePayment,
    SettlementResultDTO,
    VerifyPayment,
    VerifyPaymentCommandDTO,
)
from src.depends import (
    get_invoice_generator,
    get_notification_service,
    get_payment_gateway,
    get_session,
)
from src.domain.payment_receipt import PaymentType

router = APIRouter(prefix="/payments", tags=["Payments"])


def build_settle_payment(
    session: AsyncSession,
    notification_service: NotificationService,
    invoice_generator: InvoiceGenerator,
) -> SettlePayment:
    uow = SqlAlchemyUnitOfWork(session)
    organization_repo = SqlAlchemyOrganizationRepository(session)
    receipt_repo = SqlAlchemyPaymentReceiptRepository(session)
    return SettlePayment(
        uow=uow,
        organization_repo=organization_repo,
        receipt_repo=receipt_repo,
        apply_credit_delta=ApplyCreditDelta(
            uow, organization_repo, SqlAlchemyCreditTransactionRepository(session)
        ),
        generate_invoice=GenerateInvoice(uow, receipt_repo, organization_repo, invoice_generator),
        notification_service=notification_service,
        member_repo=SqlAlchemyOrganizationMemberRepository(session),
        record_activity=RecordActivity(
            uow, SqlAlchemyUsageLogRepository(session), SqlAlchemyAuditLogRepository(session)
        ),
    )


def _settlement_response(settlement: SettlementResultDTO) -> VerifyPaymentResponseSchema:
    return VerifyPaymentResponseSchema.model_validate(settlement.model_dump())


async def _create_order(
    command: CreateOrderCommandDTO, session: AsyncSession, gateway: PaymentGateway
) -> OrderResponseSchema:
    use_case = CreatePaymentOrder(
        organization_repo=SqlAlchemyOrganizationRepository(session),
        gateway=gateway,
        annual_discount=Decimal(str(ApplicationConfig.ANNUAL_DISCOUNT)),
    )
    result = await use_case.execute(command)
    if result.is_err():
        raise ClientError(result.error)
    return OrderResponseSchema.model_validate(result.value.model_dump())


@router.post(
    "/create-order",
    response_model=OrderResponseSchema,
    status_code=status.HTTP_200_OK,
    responses={
        400: {
            "description": "Validation error (including amounts below the currency minimum)",
            "content": {
                "application/json": {
                    "example": {"error": {"code": "VALIDATION_ERROR", "message": "Minimum amount is 1 INR"}}
                }
            }
        },
        502: {"description": "Payment gateway rejected the order"},
        503: {"description": "Payment gateway unavailable"},
    }
)
async def create_order(
    request: CreateOrderRequestSchema,
    user: AuthUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    Create a gateway order for a credit pack.

    **Example request:**
    ```json
    {"credits": 50, "amount": 225, "currency": "INR"}
    ```

    **Returns:** `{orderId, amount (minor units), currency, key}`
    """
    command = CreateOrderCommandDTO(
        user_id=user.id,
        payment_type=PaymentType.CREDITS,
        credits=request.credits,
        amount=request.amount,
        currency=request.currency,
        description=request.description,
    )
    return await _create_order(command, session, gateway)


@router.post("/create-subscription", response_model=OrderResponseSchema)
async def create_subscription_order(
    request: CreateSubscriptionRequestSchema,
    user: AuthUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """Create a gateway order for a subscription plan (price from the tier table)."""
    command = CreateOrderCommandDTO(
        user_id=user.id,
        payment_type=PaymentType.SUBSCRIPTION,
        subscription_tier=request.tier,
        billing_interval=request.billing_interval,
        currency=request.currency,
    )
    return await _create_order(command, session, gateway)


async def _verify(
    command: VerifyPaymentCommandDTO,
    session: AsyncSession,
    gateway: PaymentGateway,
    notification_service: NotificationService,
    invoice_generator: InvoiceGenerator,
) -> VerifyPaymentResponseSchema:
    use_case = VerifyPayment(
        organization_repo=SqlAlchemyOrganizationRepository(session),
        gateway=gateway,
        settle_payment=build_settle_payment(session, notification_service, invoice_generator),
        key_secret=ApplicationConfig.RAZORPAY_KEY_SECRET,
    )
    result = await use_case.execute(command)
    if result.is_err():
        raise ClientError(result.error)
    return _settlement_response(result.value)


@router.post(
    "/verify",
    response_model=VerifyPaymentResponseSchema,
    responses={
        400: {
            "description": "Invalid signature",
            "content": {
                "application/json": {
                    "example": {"error": {"code": "INVALID_SIGNATURE", "message": "Payment signature verification failed"}}
                }
            }
        },
        402: {"description": "Payment not captured"},
        403: {"description": "Payment belongs to another organization"},
    }
)
async def verify_payment(
    request: VerifyPaymentRequestSchema,
    user: AuthUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notification_service: NotificationService = Depends(get_notification_service),
    invoice_generator: InvoiceGenerator = Depends(get_invoice_generator),
):
    """
    Verify a credit purchase after checkout and credit the organization.

    Safe to call any number of times and concurrently with the webhook: the
    payment is credited exactly once and replays answer `alreadyProcessed: true`.
    """
    command = VerifyPaymentCommandDTO(
        order_id=request.order_id,
        payment_id=request.payment_id,
        signature=request.signature,
        user_id=user.id,
        user_email=user.email,
        user_name=user.name,
        expected_type=PaymentType.CREDITS,
        credits=request.credits,
        amount=request.amount,
        currency=request.currency,
    )
    return await _verify(command, session, gateway, notification_service, invoice_generator)


@router.post("/verify-subscription", response_model=VerifyPaymentResponseSchema)
async def verify_subscription(
    request: VerifySubscriptionRequestSchema,
    user: AuthUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notification_service: NotificationService = Depends(get_notification_service),
    invoice_generator: InvoiceGenerator = Depends(get_invoice_generator),
):
    """Verify a subscription payment and activate the plan."""
    command = VerifyPaymentCommandDTO(
        order_id=request.order_id,
        payment_id=request.payment_id,
        signature=request.signature,
        user_id=user.id,
        user_email=user.email,
        user_name=user.name,
        expected_type=PaymentType.SUBSCRIPTION,
    )
    return await _verify(command, session, gateway, notification_service, invoice_generator)


@router.post("/webhook", response_model=WebhookResponseSchema)
async def payment_webhook(
    request: Request,
    x_razorpay_signature: str = Header(default=None),
    session: AsyncSession = Depends(get_session),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notification_service: NotificationService = Depends(get_notification_service),
    invoice_generator: InvoiceGenerator = Depends(get_invoice_generator),
):
    """
    Gateway webhook (`X-Razorpay-Signature` over the raw body).

    Answers `{received: true}` for every correctly signed delivery, including
    ignored events and settlements that failed internally (logged).
    """
    raw_body = await request.body()
    use_case = HandlePaymentWebhook(
        gateway=gateway,
        settle_payment=build_settle_payment(session, notification_service, invoice_generator),
        webhook_secret=ApplicationConfig.RAZORPAY_WEBHOOK_SECRET,
    )
    result = await use_case.execute(raw_body, x_razorpay_signature)
    if result.is_err():
        raise ClientError(result.error)
    return WebhookResponseSchema(received=True)
