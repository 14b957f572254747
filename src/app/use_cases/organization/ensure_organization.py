"""EnsureOrganization Use Case

First call after sign-up: gives the user a free-tier workspace they own,
or returns the organization they already belong to.
"""

import logging
from datetime import datetime
from typing import Callable
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.organization_repository import OrganizationRepository
from src.app.repositories.organization_member_repository import OrganizationMemberRepository
from src.domain.organization import Organization, SubscriptionStatus, SubscriptionTier
from src.domain.organization_member import MemberRole, OrganizationMember
from src.domain.subscription_plan import TIER_ALLOWANCES
from .dtos import EnsureOrganizationCommandDTO, EnsureOrganizationResultDTO
from .get_organization import to_organization_dto

logger = logging.getLogger(__name__)


class EnsureOrganization:
    """
    Use Case: Make sure the caller has an organization

    Business Rules:
    1. A user who is already a member gets that organization back with
       created=False and nothing is written
    2. Otherwise a free-tier organization is created with the free
       allowances, a zero credit balance and the caller's email as billing
       email; the caller becomes its owner
    3. The organization and the owner membership commit together
    """

    def __init__(
        self,
        uow: UnitOfWork,
        organization_repo: OrganizationRepository,
        member_repo: OrganizationMemberRepository,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.uow = uow
        self.organization_repo = organization_repo
        self.member_repo = member_repo
        self.clock = clock

    async def execute(self, command: EnsureOrganizationCommandDTO) -> Result[EnsureOrganizationResultDTO]:
        try:
            existing = await self._existing(command.user_id)
            if existing:
                return Return.ok(existing)

            now = self.clock()
            allowance = TIER_ALLOWANCES[SubscriptionTier.FREE]
            organization = await self.organization_repo.create(
                Organization(
                    name=f"{self._display_name(command)}'s Workspace",
                    owner_id=command.user_id,
                    billing_email=command.user_email or None,
                    subscription_tier=SubscriptionTier.FREE,
                    subscription_status=SubscriptionStatus.ACTIVE,
                    calls_limit=allowance.calls,
                    storage_limit_mb=allowance.storage_mb,
                    users_limit=allowance.seats,
                    credits_balance=0,
                    daily_reset_date=now.date(),
                    created_at=now,
                    updated_at=now,
                )
            )
            member = await self.member_repo.create(
                OrganizationMember(
                    organization_id=organization.id,
                    user_id=command.user_id,
                    email=command.user_email,
                    role=MemberRole.OWNER,
                    joined_at=now,
                )
            )
            await self.uow.commit()

        except IntegrityError:
            # A concurrent call for the same user committed first
            await self.uow.rollback()
            return await self._after_conflict(command)

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to ensure organization for user {command.user_id}: {e}")
            return Return.err(
                Error(
                    code="ENSURE_ORGANIZATION_FAILED",
                    message="Failed to set up organization",
                    reason=str(e),
                )
            )

        logger.info(f"Created free organization {organization.id} for user {command.user_id}")
        return Return.ok(
            EnsureOrganizationResultDTO(
                organization=to_organization_dto(organization, member.role),
                created=True,
            )
        )

    async def _existing(self, user_id: str):
        member = await self.member_repo.get_by_user_id(user_id)
        if not member:
            return None
        organization = await self.organization_repo.get_by_id(member.organization_id)
        if not organization:
            return None
        return EnsureOrganizationResultDTO(
            organization=to_organization_dto(organization, member.role), created=False
        )

    async def _after_conflict(self, command: EnsureOrganizationCommandDTO) -> Result[EnsureOrganizationResultDTO]:
        try:
            existing = await self._existing(command.user_id)
        except Exception as e:
            logger.error(f"Re-reading organization for user {command.user_id} failed: {e}")
            existing = None
        if existing:
            return Return.ok(existing)
        return Return.err(
            Error(
                code="ENSURE_ORGANIZATION_FAILED",
                message="Failed to set up organization",
                reason="integrity violation without an existing membership",
            )
        )

    @staticmethod
    def _display_name(command: EnsureOrganizationCommandDTO) -> str:
        if command.user_name:
            return command.user_name
        if command.user_email and "@" in command.user_email:
            return command.user_email.split("@")[0]
        return "User"
