"""CreateInvitation Use Case"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.notification_service import NotificationService
from src.app.repositories.organization_repository import OrganizationRepository
from src.app.repositories.organization_member_repository import OrganizationMemberRepository
from src.app.repositories.invitation_repository import InvitationRepository
from src.domain.invitation import Invitation
from src.domain.organization_member import INVITING_ROLES, MemberRole
from .dtos import CreateInvitationCommandDTO, InvitationDTO

logger = logging.getLogger(__name__)


class CreateInvitation:
    """
    Use Case: Invite someone to the caller's organization

    Business Rules:
    1. Only owners, admins and managers may invite
    2. Nobody can be invited as owner
    3. Members plus pending invitations may not exceed users_limit
    4. The token is random and valid for a fixed number of days
    5. The invitation email is best-effort
    """

    def __init__(
        self,
        uow: UnitOfWork,
        organization_repo: OrganizationRepository,
        member_repo: OrganizationMemberRepository,
        invitation_repo: InvitationRepository,
        notification_service: NotificationService,
        ttl_days: int = 7,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.uow = uow
        self.organization_repo = organization_repo
        self.member_repo = member_repo
        self.invitation_repo = invitation_repo
        self.notification_service = notification_service
        self.ttl_days = ttl_days
        self.clock = clock

    async def execute(self, command: CreateInvitationCommandDTO) -> Result[InvitationDTO]:
        try:
            inviter = await self.member_repo.get_by_user_id(command.inviter_id)
            if not inviter:
                return Return.err(
                    Error(code="ORGANIZATION_NOT_FOUND", message="You are not a member of any organization")
                )
            if inviter.role not in INVITING_ROLES:
                return Return.err(
                    Error(code="FORBIDDEN", message="Only owners, admins and managers can invite members")
                )
            if command.role == MemberRole.OWNER:
                return Return.err(
                    Error(code="VALIDATION_ERROR", message="Cannot invite a member as owner")
                )

            organization = await self.organization_repo.get_by_id(inviter.organization_id)
            now = self.clock()
            members = await self.member_repo.count_by_organization(organization.id)
            pending = await self.invitation_repo.count_pending(organization.id, now)
            if members + pending >= organization.users_limit:
                return Return.err(
                    Error(
                        code="SEAT_LIMIT_REACHED",
                        message=f"Your plan allows {organization.users_limit} users",
                        reason=f"members={members}, pending={pending}",
                    )
                )

            invitation = await self.invitation_repo.create(
                Invitation(
                    organization_id=organization.id,
                    email=command.email.strip().lower(),
                    role=command.role,
                    token=secrets.token_urlsafe(32),
                    invited_by=command.inviter_id,
                    expires_at=now + timedelta(days=self.ttl_days),
                )
            )
            await self.uow.commit()

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to create invitation for {command.email}: {e}")
            return Return.err(
                Error(code="CREATE_INVITATION_FAILED", message="Failed to create invitation", reason=str(e))
            )

        try:
            await self.notification_service.send_invitation(
                invitation.email, organization.name, command.inviter_email, invitation.token
            )
        except Exception as e:
            logger.error(f"Invitation email to {invitation.email} failed: {e}")

        logger.info(f"Invitation {invitation.id} created for organization {organization.id}")
        return Return.ok(
            InvitationDTO(
                id=invitation.id,
                organization_id=invitation.organization_id,
                email=invitation.email,
                role=invitation.role.value,
                token=invitation.token,
                expires_at=invitation.expires_at,
            )
        )
