"""AcceptInvitation Use Case"""

import logging
from datetime import datetime
from typing import Callable
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.organization_member_repository import OrganizationMemberRepository
from src.app.repositories.invitation_repository import InvitationRepository
from src.domain.organization_member import OrganizationMember
from .dtos import AcceptInvitationCommandDTO, MembershipDTO

logger = logging.getLogger(__name__)


def _not_found() -> Error:
    return Error(code="INVITATION_NOT_FOUND", message="Invitation not found, expired or already used")


class AcceptInvitation:
    """
    Use Case: Join an organization with an invitation token

    Business Rules:
    1. The token must be unaccepted and unexpired
    2. The caller's email must match the invitation (case-insensitive)
    3. Existing members get ALREADY_MEMBER
    4. Marking the token used and inserting the membership commit together;
       the conditional UPDATE lets only one concurrent accept succeed
    """

    def __init__(
        self,
        uow: UnitOfWork,
        member_repo: OrganizationMemberRepository,
        invitation_repo: InvitationRepository,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.uow = uow
        self.member_repo = member_repo
        self.invitation_repo = invitation_repo
        self.clock = clock

    async def execute(self, command: AcceptInvitationCommandDTO) -> Result[MembershipDTO]:
        try:
            now = self.clock()
            invitation = await self.invitation_repo.get_pending_by_token(command.token, now)
            if not invitation:
                return Return.err(_not_found())

            if invitation.email.strip().lower() != command.user_email.strip().lower():
                logger.warning(
                    f"User {command.user_id} tried to accept invitation {invitation.id} "
                    f"addressed to another email"
                )
                return Return.err(
                    Error(code="FORBIDDEN", message="This invitation was sent to a different email")
                )

            if await self.member_repo.get(invitation.organization_id, command.user_id):
                return Return.err(
                    Error(code="ALREADY_MEMBER", message="You are already a member of this organization")
                )

            if not await self.invitation_repo.mark_accepted(invitation.id, now):
                await self.uow.rollback()
                return Return.err(_not_found())

            member = await self.member_repo.create(
                OrganizationMember(
                    organization_id=invitation.organization_id,
                    user_id=command.user_id,
                    email=command.user_email,
                    role=invitation.role,
                    invited_by=invitation.invited_by,
                    joined_at=now,
                )
            )
            await self.uow.commit()

        except IntegrityError:
            await self.uow.rollback()
            return Return.err(
                Error(code="ALREADY_MEMBER", message="You are already a member of this organization")
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to accept invitation for user {command.user_id}: {e}")
            return Return.err(
                Error(code="ACCEPT_INVITATION_FAILED", message="Failed to accept invitation", reason=str(e))
            )

        logger.info(f"User {command.user_id} joined organization {member.organization_id}")
        return Return.ok(
            MembershipDTO(
                organization_id=member.organization_id,
                user_id=member.user_id,
                role=member.role.value,
                joined_at=member.joined_at,
            )
        )
