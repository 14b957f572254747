"""Unit tests for ApplyCreditDelta use case

Tests cover:
- Successful purchase and usage deltas
- Idempotency (pre-check and concurrent unique violation)
- Insufficient credits
- Unknown organization
"""

import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from src.app.use_cases.billing.apply_credit_delta import ApplyCreditDelta
from src.app.use_cases.billing.dtos import ApplyCreditDeltaCommandDTO
from src.domain.credit_transaction import CreditTransaction, TransactionType


@pytest.fixture
def mock_organization_repo():
    return MagicMock()


@pytest.fixture
def mock_transaction_repo():
    return MagicMock()


@pytest.fixture
def use_case(mock_uow, mock_organization_repo, mock_transaction_repo):
    return ApplyCreditDelta(
        uow=mock_uow,
        organization_repo=mock_organization_repo,
        transaction_repo=mock_transaction_repo,
    )


@pytest.fixture
def purchase_command():
    return ApplyCreditDeltaCommandDTO(
        organization_id="org_123",
        delta=50,
        transaction_type=TransactionType.PURCHASE,
        amount_paid=Decimal("225.00"),
        currency="INR",
        description="Purchased 50 credits",
        idempotency_key="pay_NXk2l8yFh3ABCD12",
    )


def stored_transaction(**fields) -> CreditTransaction:
    defaults = dict(
        id=7,
        organization_id="org_123",
        transaction_type=TransactionType.PURCHASE,
        delta=50,
        balance_after=50,
        amount_paid=Decimal("225.00"),
        currency="INR",
        idempotency_key="pay_NXk2l8yFh3ABCD12",
        created_at=datetime(2026, 3, 1),
    )
    defaults.update(fields)
    return CreditTransaction(**defaults)


def with_id(transaction_id: int):
    """Repository create stub that assigns a primary key"""

    def _create(transaction: CreditTransaction) -> CreditTransaction:
        transaction.id = transaction_id
        return transaction

    return _create


@pytest.mark.asyncio
class TestApplyCreditDeltaSuccess:

    async def test_purchase_increments_balance_and_records_transaction(
        self, use_case, mock_uow, mock_organization_repo, mock_transaction_repo,
        purchase_command, make_organization,
    ):
        """
        Given: An organization with 0 credits and an unused payment id
        When: A +50 purchase is applied
        Then: The balance is incremented atomically and one transaction is stored
        """
        mock_transaction_repo.get_by_idempotency_key = AsyncMock(return_value=None)
        mock_organization_repo.get_by_id = AsyncMock(return_value=make_organization())
        mock_organization_repo.increment_credits = AsyncMock(return_value=50)
        mock_transaction_repo.create = AsyncMock(side_effect=with_id(7))

        result = await use_case.execute(purchase_command)

        assert result.is_ok()
        assert result.value.delta == 50
        assert result.value.balance_after == 50
        assert result.value.already_processed is False
        mock_organization_repo.increment_credits.assert_called_once_with("org_123", 50)
        created = mock_transaction_repo.create.call_args.args[0]
        assert created.idempotency_key == "pay_NXk2l8yFh3ABCD12"
        assert created.balance_after == 50
        mock_uow.commit.assert_called_once()

    async def test_usage_deducts(
        self, use_case, mock_organization_repo, mock_transaction_repo, make_organization,
    ):
        mock_transaction_repo.get_by_idempotency_key = AsyncMock(return_value=None)
        mock_organization_repo.get_by_id = AsyncMock(return_value=make_organization(credits_balance=3))
        mock_organization_repo.increment_credits = AsyncMock(return_value=2)
        mock_transaction_repo.create = AsyncMock(side_effect=with_id(8))

        result = await use_case.execute(
            ApplyCreditDeltaCommandDTO(
                organization_id="org_123",
                delta=-1,
                transaction_type=TransactionType.USAGE,
                idempotency_key="usage:ca_1",
            )
        )

        assert result.is_ok()
        assert result.value.balance_after == 2
        assert result.value.transaction_type == "usage"


@pytest.mark.asyncio
class TestApplyCreditDeltaIdempotency:

    async def test_replayed_key_returns_stored_transaction_without_writing(
        self, use_case, mock_uow, mock_organization_repo, mock_transaction_repo, purchase_command,
    ):
        mock_transaction_repo.get_by_idempotency_key = AsyncMock(return_value=stored_transaction())
        mock_organization_repo.increment_credits = AsyncMock()

        result = await use_case.execute(purchase_command)

        assert result.is_ok()
        assert result.value.already_processed is True
        assert result.value.transaction_id == 7
        mock_organization_repo.increment_credits.assert_not_called()
        mock_uow.commit.assert_not_called()

    async def test_concurrent_writer_wins_the_unique_key(
        self, use_case, mock_uow, mock_organization_repo, mock_transaction_repo,
        purchase_command, make_organization,
    ):
        """
        Given: Two settlements of the same payment race
        When: Our insert hits the unique idempotency_key
        Then: Our increment is rolled back and the winner's transaction returned
        """
        mock_transaction_repo.get_by_idempotency_key = AsyncMock(
            side_effect=[None, stored_transaction()]
        )
        mock_organization_repo.get_by_id = AsyncMock(return_value=make_organization())
        mock_organization_repo.increment_credits = AsyncMock(return_value=100)
        mock_transaction_repo.create = AsyncMock(
            side_effect=IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
        )

        result = await use_case.execute(purchase_command)

        assert result.is_ok()
        assert result.value.already_processed is True
        assert result.value.balance_after == 50
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
class TestApplyCreditDeltaFailures:

    async def test_insufficient_credits(
        self, use_case, mock_uow, mock_organization_repo, mock_transaction_repo, make_organization,
    ):
        mock_transaction_repo.get_by_idempotency_key = AsyncMock(return_value=None)
        mock_organization_repo.get_by_id = AsyncMock(return_value=make_organization(credits_balance=0))
        mock_organization_repo.increment_credits = AsyncMock(return_value=None)
        mock_transaction_repo.create = AsyncMock()

        result = await use_case.execute(
            ApplyCreditDeltaCommandDTO(
                organization_id="org_123",
                delta=-1,
                transaction_type=TransactionType.USAGE,
                idempotency_key="usage:ca_2",
            )
        )

        assert result.is_err()
        assert result.error.code == "INSUFFICIENT_CREDITS"
        mock_transaction_repo.create.assert_not_called()
        mock_uow.rollback.assert_called_once()

    async def test_unknown_organization(
        self, use_case, mock_organization_repo, mock_transaction_repo, purchase_command,
    ):
        mock_transaction_repo.get_by_idempotency_key = AsyncMock(return_value=None)
        mock_organization_repo.get_by_id = AsyncMock(return_value=None)

        result = await use_case.execute(purchase_command)

        assert result.is_err()
        assert result.error.code == "ORGANIZATION_NOT_FOUND"

    async def test_unexpected_error_rolls_back(
        self, use_case, mock_uow, mock_organization_repo, mock_transaction_repo, purchase_command,
    ):
        mock_transaction_repo.get_by_idempotency_key = AsyncMock(side_effect=RuntimeError("db down"))

        result = await use_case.execute(purchase_command)

        assert result.is_err()
        assert result.error.code == "APPLY_CREDIT_FAILED"
        assert result.error.reason == "db down"
        mock_uow.rollback.assert_called_once()

    async def test_reread_after_unique_violation_fails(
        self, use_case, mock_uow, mock_organization_repo, mock_transaction_repo,
        purchase_command, make_organization,
    ):
        mock_transaction_repo.get_by_idempotency_key = AsyncMock(
            side_effect=[None, RuntimeError("connection lost")]
        )
        mock_organization_repo.get_by_id = AsyncMock(return_value=make_organization())
        mock_organization_repo.increment_credits = AsyncMock(return_value=100)
        mock_transaction_repo.create = AsyncMock(
            side_effect=IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
        )

        result = await use_case.execute(purchase_command)

        assert result.is_err()
        assert result.error.code == "APPLY_CREDIT_FAILED"
        assert result.error.reason == "connection lost"
        mock_uow.commit.assert_not_called()


def test_zero_delta_is_rejected():
    with pytest.raises(ValidationError):
        ApplyCreditDeltaCommandDTO(
            organization_id="org_123", delta=0, transaction_type=TransactionType.USAGE
        )
