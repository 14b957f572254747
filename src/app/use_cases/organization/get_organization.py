from libs.result import Result, Return, Error
from src.app.repositories.organization_repository import OrganizationRepository
from src.app.repositories.organization_member_repository import OrganizationMemberRepository
from src.domain.organization import Organization
from src.domain.organization_member import MemberRole
from .dtos import OrganizationDTO


def to_organization_dto(organization: Organization, role: MemberRole) -> OrganizationDTO:
    return OrganizationDTO(
        id=organization.id,
        name=organization.name,
        subscription_tier=organization.subscription_tier.value,
        subscription_status=organization.subscription_status.value,
        billing_interval=organization.billing_interval.value,
        calls_used=organization.calls_used,
        calls_limit=organization.calls_limit,
        storage_used_mb=float(organization.storage_used_mb),
        storage_limit_mb=organization.storage_limit_mb,
        users_limit=organization.users_limit,
        credits_balance=organization.credits_balance,
        current_period_end=organization.current_period_end,
        role=role.value,
    )


class GetOrganization:
    """Use Case: The caller's organization with usage counters and role"""

    def __init__(
        self,
        organization_repo: OrganizationRepository,
        member_repo: OrganizationMemberRepository,
    ):
        self.organization_repo = organization_repo
        self.member_repo = member_repo

    async def execute(self, user_id: str) -> Result[OrganizationDTO]:
        member = await self.member_repo.get_by_user_id(user_id)
        organization = (
            await self.organization_repo.get_by_id(member.organization_id) if member else None
        )
        if not organization:
            return Return.err(
                Error(
                    code="ORGANIZATION_NOT_FOUND",
                    message="You are not a member of any organization",
                )
            )

        return Return.ok(to_organization_dto(organization, member.role))
