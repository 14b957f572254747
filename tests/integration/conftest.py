"""Integration fixtures

The FastAPI app runs against an in-memory SQLite database (aiosqlite) with a
fresh session per request. The payment gateway and email are replaced by
in-process fakes; callers authenticate with X-User-Id / X-User-Email.
"""

import hashlib
import hmac
import itertools
from datetime import datetime
from typing import Dict, List, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import src.domain  # noqa: F401  registers the table models
from config import ApplicationConfig
from src.api.app import create_app
from src.app.services.notification_service import NotificationService
from src.app.services.payment_gateway import (
    GatewayOrder,
    GatewayPayment,
    GatewayRejectedError,
    PaymentGateway,
)
from src.depends import get_notification_service, get_payment_gateway, get_session
from src.domain.organization import Organization, SubscriptionTier
from src.domain.organization_member import MemberRole, OrganizationMember

KEY_SECRET = "rzp_test_secret"
WEBHOOK_SECRET = "whsec_test"
ADMIN_EMAIL = "ops@audiolyse.com"


class FakeGateway(PaymentGateway):
    """Stores orders and payments in memory"""

    def __init__(self):
        self.orders: Dict[str, GatewayOrder] = {}
        self.payments: Dict[str, GatewayPayment] = {}
        self.create_order_calls = 0
        self._ids = itertools.count(1)

    @property
    def key_id(self) -> str:
        return "rzp_test_key"

    async def create_order(self, amount, currency, receipt, notes) -> GatewayOrder:
        self.create_order_calls += 1
        order = GatewayOrder(
            id=f"order_T{next(self._ids):07d}",
            amount=amount,
            currency=currency,
            receipt=receipt,
            status="created",
            notes=dict(notes),
        )
        self.orders[order.id] = order
        return order

    async def fetch_payment(self, payment_id: str) -> GatewayPayment:
        if payment_id not in self.payments:
            raise GatewayRejectedError("The id provided does not exist", status_code=400)
        return self.payments[payment_id].model_copy()

    async def fetch_order(self, order_id: str) -> GatewayOrder:
        if order_id not in self.orders:
            raise GatewayRejectedError("The id provided does not exist", status_code=400)
        return self.orders[order_id].model_copy()

    def capture(self, order_id: str, payment_id: str, status: str = "captured") -> GatewayPayment:
        order = self.orders[order_id]
        payment = GatewayPayment(
            id=payment_id,
            order_id=order_id,
            amount=order.amount,
            currency=order.currency,
            status=status,
            notes=dict(order.notes),
        )
        self.payments[payment_id] = payment
        order.status = "paid"
        return payment


class RecordingNotificationService(NotificationService):
    def __init__(self):
        self.receipts: List[Tuple[str, str]] = []
        self.invitations: List[Tuple[str, str]] = []

    async def send_payment_receipt(self, to_email, invoice) -> bool:
        self.receipts.append((to_email, invoice.invoice_number))
        return True

    async def send_invitation(self, to_email, organization_name, inviter_email, token) -> bool:
        self.invitations.append((to_email, token))
        return True


def checkout_signature(order_id: str, payment_id: str) -> str:
    return hmac.new(KEY_SECRET.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()


def webhook_signature(body: bytes) -> str:
    return hmac.new(WEBHOOK_SECRET.encode(), body, hashlib.sha256).hexdigest()


def auth_headers(user_id: str, email: str) -> Dict[str, str]:
    return {"X-User-Id": user_id, "X-User-Email": email}


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def notifications():
    return RecordingNotificationService()


@pytest.fixture
def app(monkeypatch, session_factory, gateway, notifications):
    monkeypatch.setattr(ApplicationConfig, "AUTH_DISABLED", True)
    monkeypatch.setattr(ApplicationConfig, "RAZORPAY_KEY_SECRET", KEY_SECRET)
    monkeypatch.setattr(ApplicationConfig, "RAZORPAY_WEBHOOK_SECRET", WEBHOOK_SECRET)
    monkeypatch.setattr(ApplicationConfig, "ADMIN_EMAILS", [ADMIN_EMAIL])
    monkeypatch.setattr(ApplicationConfig, "ENABLE_LOGGING_MIDDLEWARE", False)

    async def override_session():
        async with session_factory() as session:
            yield session

    app = create_app(ApplicationConfig)
    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_notification_service] = lambda: notifications
    return app


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def create_organization(session_factory):
    """Insert an organization with its owner membership"""

    async def _create(
        owner_id: str = "user_owner",
        owner_email: str = "owner@example.com",
        **fields,
    ) -> Organization:
        defaults = dict(
            name="Acme Calls",
            owner_id=owner_id,
            subscription_tier=SubscriptionTier.PAYG,
            credits_balance=0,
        )
        defaults.update(fields)
        async with session_factory() as session:
            organization = Organization(**defaults)
            session.add(organization)
            await session.flush()
            session.add(
                OrganizationMember(
                    organization_id=organization.id,
                    user_id=owner_id,
                    email=owner_email,
                    role=MemberRole.OWNER,
                    joined_at=datetime(2026, 1, 1),
                )
            )
            await session.commit()
            await session.refresh(organization)
            return organization

    return _create
