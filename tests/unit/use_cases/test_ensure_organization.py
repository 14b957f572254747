"""Unit tests for EnsureOrganization use case"""

import pytest
from datetime import date, datetime
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.exc import IntegrityError

from src.app.use_cases.organization import EnsureOrganization, EnsureOrganizationCommandDTO
from src.domain.organization import Organization, SubscriptionTier
from src.domain.organization_member import MemberRole, OrganizationMember

NOW = datetime(2026, 5, 1, 9, 0)


def owner_membership(organization_id="org_123") -> OrganizationMember:
    return OrganizationMember(
        id=1, organization_id=organization_id, user_id="user_new", email="new@example.com",
        role=MemberRole.OWNER, joined_at=NOW,
    )


def assign_org_id(organization: Organization) -> Organization:
    organization.id = "org_new"
    return organization


@pytest.fixture
def mock_organization_repo():
    repo = MagicMock()
    repo.create = AsyncMock(side_effect=assign_org_id)
    return repo


@pytest.fixture
def mock_member_repo():
    repo = MagicMock()
    repo.get_by_user_id = AsyncMock(return_value=None)
    repo.create = AsyncMock(side_effect=lambda member: member)
    return repo


@pytest.fixture
def use_case(mock_uow, mock_organization_repo, mock_member_repo):
    return EnsureOrganization(mock_uow, mock_organization_repo, mock_member_repo, clock=lambda: NOW)


def command(**fields) -> EnsureOrganizationCommandDTO:
    defaults = dict(user_id="user_new", user_email="new@example.com")
    defaults.update(fields)
    return EnsureOrganizationCommandDTO(**defaults)


@pytest.mark.asyncio
class TestEnsureOrganization:

    async def test_new_user_gets_a_free_workspace(
        self, use_case, mock_uow, mock_organization_repo, mock_member_repo,
    ):
        """
        Given: A user with no membership
        When: Their organization is ensured
        Then: A free organization with free allowances and an owner membership commit together
        """
        result = await use_case.execute(command())

        assert result.is_ok()
        assert result.value.created is True
        assert result.value.organization.id == "org_new"
        assert result.value.organization.role == "owner"

        organization = mock_organization_repo.create.call_args.args[0]
        assert organization.name == "new's Workspace"
        assert organization.owner_id == "user_new"
        assert organization.billing_email == "new@example.com"
        assert organization.subscription_tier == SubscriptionTier.FREE
        assert organization.calls_limit == 3
        assert organization.storage_limit_mb == 50
        assert organization.users_limit == 1
        assert organization.credits_balance == 0
        assert organization.daily_reset_date == date(2026, 5, 1)

        member = mock_member_repo.create.call_args.args[0]
        assert member.organization_id == "org_new"
        assert member.role == MemberRole.OWNER
        mock_uow.commit.assert_called_once()

    async def test_display_name_is_used_when_known(self, use_case, mock_organization_repo):
        await use_case.execute(command(user_name="Priya"))

        assert mock_organization_repo.create.call_args.args[0].name == "Priya's Workspace"

    async def test_existing_member_gets_their_organization(
        self, use_case, mock_uow, mock_organization_repo, mock_member_repo, make_organization,
    ):
        mock_member_repo.get_by_user_id = AsyncMock(return_value=owner_membership())
        mock_organization_repo.get_by_id = AsyncMock(return_value=make_organization(credits_balance=40))

        result = await use_case.execute(command())

        assert result.value.created is False
        assert result.value.organization.id == "org_123"
        assert result.value.organization.credits_balance == 40
        mock_organization_repo.create.assert_not_called()
        mock_uow.commit.assert_not_called()

    async def test_concurrent_call_returns_the_winner(
        self, use_case, mock_uow, mock_organization_repo, mock_member_repo, make_organization,
    ):
        mock_member_repo.get_by_user_id = AsyncMock(side_effect=[None, owner_membership()])
        mock_member_repo.create = AsyncMock(
            side_effect=IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
        )
        mock_organization_repo.get_by_id = AsyncMock(return_value=make_organization())

        result = await use_case.execute(command())

        assert result.is_ok()
        assert result.value.created is False
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_not_called()

    async def test_database_failure_rolls_back(self, use_case, mock_uow, mock_organization_repo):
        mock_organization_repo.create = AsyncMock(side_effect=RuntimeError("db down"))

        result = await use_case.execute(command())

        assert result.is_err()
        assert result.error.code == "ENSURE_ORGANIZATION_FAILED"
        assert result.error.reason == "db down"
        mock_uow.rollback.assert_called_once()
