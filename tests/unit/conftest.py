import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

from src.domain.organization import Organization, SubscriptionTier


@pytest.fixture
def mock_uow():
    """Mock unit of work"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock()
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def make_organization():
    """Factory for in-memory organizations"""

    def _make(**fields) -> Organization:
        defaults = dict(
            id="org_123",
            name="Acme Calls",
            owner_id="user_owner",
            subscription_tier=SubscriptionTier.PAYG,
            credits_balance=0,
            created_at=datetime(2026, 1, 1),
            updated_at=datetime(2026, 1, 1),
        )
        defaults.update(fields)
        return Organization(**defaults)

    return _make
