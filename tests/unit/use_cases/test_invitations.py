"""Unit tests for CreateInvitation and AcceptInvitation"""

import pytest
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.exc import IntegrityError

from src.app.use_cases.organization import (
    AcceptInvitation,
    AcceptInvitationCommandDTO,
    CreateInvitation,
    CreateInvitationCommandDTO,
)
from src.domain.invitation import Invitation
from src.domain.organization import SubscriptionTier
from src.domain.organization_member import MemberRole, OrganizationMember

NOW = datetime(2026, 5, 1, 9, 0)


def member(role=MemberRole.OWNER, user_id="user_owner") -> OrganizationMember:
    return OrganizationMember(
        id=1, organization_id="org_123", user_id=user_id, email="owner@example.com", role=role,
        joined_at=NOW,
    )


def pending_invitation(email="new@example.com") -> Invitation:
    return Invitation(
        id=5,
        organization_id="org_123",
        email=email,
        role=MemberRole.MEMBER,
        token="tok_abc",
        invited_by="user_owner",
        expires_at=NOW + timedelta(days=7),
    )


def with_id(invitation_id: int):
    def _create(invitation: Invitation) -> Invitation:
        invitation.id = invitation_id
        return invitation

    return _create


@pytest.fixture
def mock_member_repo():
    repo = MagicMock()
    repo.get_by_user_id = AsyncMock(return_value=member())
    repo.count_by_organization = AsyncMock(return_value=1)
    repo.get = AsyncMock(return_value=None)
    repo.create = AsyncMock(side_effect=lambda m: m)
    return repo


@pytest.fixture
def mock_invitation_repo():
    repo = MagicMock()
    repo.count_pending = AsyncMock(return_value=0)
    repo.create = AsyncMock(side_effect=with_id(9))
    repo.get_pending_by_token = AsyncMock(return_value=pending_invitation())
    repo.mark_accepted = AsyncMock(return_value=True)
    return repo


@pytest.fixture
def mock_organization_repo(make_organization):
    repo = MagicMock()
    repo.get_by_id = AsyncMock(
        return_value=make_organization(subscription_tier=SubscriptionTier.TEAM, users_limit=10)
    )
    return repo


@pytest.fixture
def mock_notification_service():
    service = MagicMock()
    service.send_invitation = AsyncMock(return_value=True)
    return service


@pytest.fixture
def create_invitation(
    mock_uow, mock_organization_repo, mock_member_repo, mock_invitation_repo, mock_notification_service,
):
    return CreateInvitation(
        uow=mock_uow,
        organization_repo=mock_organization_repo,
        member_repo=mock_member_repo,
        invitation_repo=mock_invitation_repo,
        notification_service=mock_notification_service,
        ttl_days=7,
        clock=lambda: NOW,
    )


@pytest.fixture
def accept_invitation(mock_uow, mock_member_repo, mock_invitation_repo):
    return AcceptInvitation(mock_uow, mock_member_repo, mock_invitation_repo, clock=lambda: NOW)


def invite(email="New@Example.com", role=MemberRole.MEMBER) -> CreateInvitationCommandDTO:
    return CreateInvitationCommandDTO(
        inviter_id="user_owner", inviter_email="owner@example.com", email=email, role=role
    )


@pytest.mark.asyncio
class TestCreateInvitation:

    async def test_owner_invites_teammate(
        self, create_invitation, mock_uow, mock_invitation_repo, mock_notification_service,
    ):
        result = await create_invitation.execute(invite())

        assert result.is_ok()
        assert result.value.email == "new@example.com"
        assert result.value.expires_at == NOW + timedelta(days=7)
        assert len(result.value.token) >= 32
        mock_uow.commit.assert_called_once()
        mock_notification_service.send_invitation.assert_called_once_with(
            "new@example.com", "Acme Calls", "owner@example.com", result.value.token
        )

    async def test_plain_member_cannot_invite(self, create_invitation, mock_member_repo, mock_invitation_repo):
        mock_member_repo.get_by_user_id = AsyncMock(return_value=member(role=MemberRole.MEMBER))

        result = await create_invitation.execute(invite())

        assert result.error.code == "FORBIDDEN"
        mock_invitation_repo.create.assert_not_called()

    async def test_nobody_is_invited_as_owner(self, create_invitation):
        result = await create_invitation.execute(invite(role=MemberRole.OWNER))

        assert result.error.code == "VALIDATION_ERROR"

    async def test_pending_invitations_count_against_seats(
        self, create_invitation, mock_member_repo, mock_invitation_repo,
    ):
        mock_member_repo.count_by_organization = AsyncMock(return_value=8)
        mock_invitation_repo.count_pending = AsyncMock(return_value=2)

        result = await create_invitation.execute(invite())

        assert result.error.code == "SEAT_LIMIT_REACHED"
        mock_invitation_repo.create.assert_not_called()

    async def test_email_failure_keeps_the_invitation(self, create_invitation, mock_notification_service):
        mock_notification_service.send_invitation = AsyncMock(side_effect=RuntimeError("smtp down"))

        result = await create_invitation.execute(invite())

        assert result.is_ok()


@pytest.mark.asyncio
class TestAcceptInvitation:

    async def test_accepting_creates_membership(
        self, accept_invitation, mock_uow, mock_member_repo, mock_invitation_repo,
    ):
        result = await accept_invitation.execute(
            AcceptInvitationCommandDTO(token="tok_abc", user_id="user_new", user_email="NEW@example.com")
        )

        assert result.is_ok()
        assert result.value.organization_id == "org_123"
        assert result.value.role == "member"
        mock_invitation_repo.mark_accepted.assert_called_once_with(5, NOW)
        mock_uow.commit.assert_called_once()

    async def test_used_or_expired_token(self, accept_invitation, mock_invitation_repo):
        mock_invitation_repo.get_pending_by_token = AsyncMock(return_value=None)

        result = await accept_invitation.execute(
            AcceptInvitationCommandDTO(token="tok_abc", user_id="user_new", user_email="new@example.com")
        )

        assert result.error.code == "INVITATION_NOT_FOUND"

    async def test_concurrent_accept_loses(self, accept_invitation, mock_uow, mock_invitation_repo, mock_member_repo):
        mock_invitation_repo.mark_accepted = AsyncMock(return_value=False)

        result = await accept_invitation.execute(
            AcceptInvitationCommandDTO(token="tok_abc", user_id="user_new", user_email="new@example.com")
        )

        assert result.error.code == "INVITATION_NOT_FOUND"
        mock_member_repo.create.assert_not_called()
        mock_uow.rollback.assert_called_once()

    async def test_other_email_is_forbidden(self, accept_invitation, mock_invitation_repo):
        result = await accept_invitation.execute(
            AcceptInvitationCommandDTO(token="tok_abc", user_id="user_x", user_email="x@example.com")
        )

        assert result.error.code == "FORBIDDEN"
        mock_invitation_repo.mark_accepted.assert_not_called()

    async def test_existing_member(self, accept_invitation, mock_member_repo):
        mock_member_repo.get = AsyncMock(return_value=member(role=MemberRole.MEMBER, user_id="user_new"))

        result = await accept_invitation.execute(
            AcceptInvitationCommandDTO(token="tok_abc", user_id="user_new", user_email="new@example.com")
        )

        assert result.error.code == "ALREADY_MEMBER"

    async def test_duplicate_membership_insert(self, accept_invitation, mock_uow, mock_member_repo):
        mock_member_repo.create = AsyncMock(
            side_effect=IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
        )

        result = await accept_invitation.execute(
            AcceptInvitationCommandDTO(token="tok_abc", user_id="user_new", user_email="new@example.com")
        )

        assert result.error.code == "ALREADY_MEMBER"
        mock_uow.rollback.assert_called_once()
