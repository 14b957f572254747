"""Unit tests for RecordUsage use case"""

import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

from libs.result import Error, Return
from src.app.use_cases.billing.dtos import LedgerEntryDTO, RecordUsageCommandDTO
from src.app.use_cases.billing.record_usage import RecordUsage
from src.domain.credit_transaction import TransactionType
from src.domain.organization import SubscriptionTier


@pytest.fixture
def mock_organization_repo():
    repo = MagicMock()
    repo.increment_usage = AsyncMock()
    return repo


@pytest.fixture
def mock_apply_credit_delta():
    return MagicMock()


@pytest.fixture
def record_usage(mock_uow, mock_organization_repo, mock_apply_credit_delta):
    return RecordUsage(mock_uow, mock_organization_repo, mock_apply_credit_delta)


def ledger_entry(balance_after: int, already_processed: bool = False) -> LedgerEntryDTO:
    return LedgerEntryDTO(
        transaction_id=1,
        organization_id="org_123",
        transaction_type="usage",
        delta=-1,
        balance_after=balance_after,
        created_at=datetime(2026, 3, 1),
        already_processed=already_processed,
    )


@pytest.mark.asyncio
class TestRecordUsage:

    async def test_payg_charges_one_credit_per_call(
        self, record_usage, mock_organization_repo, mock_apply_credit_delta, make_organization,
    ):
        mock_organization_repo.get_by_id = AsyncMock(
            return_value=make_organization(subscription_tier=SubscriptionTier.PAYG, credits_balance=5)
        )
        mock_apply_credit_delta.execute = AsyncMock(return_value=Return.ok(ledger_entry(4)))

        result = await record_usage.execute(
            RecordUsageCommandDTO(organization_id="org_123", call_analysis_id="ca_1")
        )

        assert result.is_ok()
        assert result.value.credits_charged == 1
        assert result.value.credits_balance == 4
        command = mock_apply_credit_delta.execute.call_args.args[0]
        assert command.delta == -1
        assert command.transaction_type == TransactionType.USAGE
        assert command.idempotency_key == "usage:ca_1"
        mock_organization_repo.increment_usage.assert_not_called()

    async def test_payg_retry_charges_nothing(
        self, record_usage, mock_organization_repo, mock_apply_credit_delta, make_organization,
    ):
        mock_organization_repo.get_by_id = AsyncMock(
            return_value=make_organization(subscription_tier=SubscriptionTier.PAYG, credits_balance=4)
        )
        mock_apply_credit_delta.execute = AsyncMock(
            return_value=Return.ok(ledger_entry(4, already_processed=True))
        )

        result = await record_usage.execute(
            RecordUsageCommandDTO(organization_id="org_123", call_analysis_id="ca_1")
        )

        assert result.value.credits_charged == 0

    async def test_payg_without_credits_fails(
        self, record_usage, mock_organization_repo, mock_apply_credit_delta, make_organization,
    ):
        mock_organization_repo.get_by_id = AsyncMock(
            return_value=make_organization(subscription_tier=SubscriptionTier.PAYG)
        )
        mock_apply_credit_delta.execute = AsyncMock(
            return_value=Return.err(Error(code="INSUFFICIENT_CREDITS", message="Insufficient credits"))
        )

        result = await record_usage.execute(
            RecordUsageCommandDTO(organization_id="org_123", call_analysis_id="ca_9")
        )

        assert result.is_err()
        assert result.error.code == "INSUFFICIENT_CREDITS"

    async def test_subscription_tiers_increment_the_counter(
        self, record_usage, mock_uow, mock_organization_repo, mock_apply_credit_delta, make_organization,
    ):
        mock_organization_repo.get_by_id = AsyncMock(
            return_value=make_organization(subscription_tier=SubscriptionTier.TEAM, calls_limit=300)
        )
        mock_apply_credit_delta.execute = AsyncMock()

        result = await record_usage.execute(
            RecordUsageCommandDTO(organization_id="org_123", call_analysis_id="ca_2", file_size_mb=4.2)
        )

        assert result.is_ok()
        assert result.value.calls_recorded == 1
        mock_organization_repo.increment_usage.assert_called_once_with("org_123", 1, 4.2)
        mock_apply_credit_delta.execute.assert_not_called()
        mock_uow.commit.assert_called_once()
