"""Unit tests for ReconcileLedger use case"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.billing.reconcile_ledger import ReconcileLedger


@pytest.fixture
def mock_organization_repo():
    return MagicMock()


@pytest.fixture
def mock_transaction_repo():
    return MagicMock()


@pytest.fixture
def use_case(mock_organization_repo, mock_transaction_repo):
    return ReconcileLedger(mock_organization_repo, mock_transaction_repo)


@pytest.mark.asyncio
class TestReconcileLedger:

    async def test_balanced_organizations(
        self, use_case, mock_organization_repo, mock_transaction_repo, make_organization,
    ):
        mock_organization_repo.get_all = AsyncMock(
            return_value=[
                make_organization(id="org_a", credits_balance=49),
                make_organization(id="org_b", credits_balance=0),
            ]
        )
        mock_transaction_repo.sum_deltas_by_organization = AsyncMock(return_value={"org_a": 49})

        result = await use_case.execute()

        assert result.is_ok()
        assert result.value.total_organizations_checked == 2
        assert result.value.discrepancies_found == 0

    async def test_drift_is_reported_not_fixed(
        self, use_case, mock_organization_repo, mock_transaction_repo, make_organization,
    ):
        """
        Given: An organization whose balance was edited outside the ledger
        When: Reconciliation runs
        Then: The difference is reported and nothing is written
        """
        mock_organization_repo.get_all = AsyncMock(
            return_value=[make_organization(id="org_a", credits_balance=60)]
        )
        mock_organization_repo.update = AsyncMock()
        mock_transaction_repo.sum_deltas_by_organization = AsyncMock(return_value={"org_a": 50})

        result = await use_case.execute()

        assert result.value.discrepancies_found == 1
        discrepancy = result.value.discrepancies[0]
        assert discrepancy.organization_id == "org_a"
        assert discrepancy.calculated_balance == 50
        assert discrepancy.discrepancy == 10
        mock_organization_repo.update.assert_not_called()

    async def test_repository_failure(self, use_case, mock_organization_repo):
        mock_organization_repo.get_all = AsyncMock(side_effect=RuntimeError("db down"))

        result = await use_case.execute()

        assert result.is_err()
        assert result.error.code == "RECONCILIATION_FAILED"
