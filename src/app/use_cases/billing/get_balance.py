"""GetCreditBalance Use Case"""

from libs.result import Result, Return, Error
from src.app.repositories.organization_repository import OrganizationRepository
from .dtos import BalanceResponseDTO


class GetCreditBalance:
    """
    Use Case: Get an organization's credit balance

    Read-only, no locking.
    """

    def __init__(self, organization_repo: OrganizationRepository):
        self.organization_repo = organization_repo

    async def execute(self, organization_id: str) -> Result[BalanceResponseDTO]:
        try:
            organization = await self.organization_repo.get_by_id(organization_id)

            if not organization:
                return Return.err(
                    Error(
                        code="ORGANIZATION_NOT_FOUND",
                        message=f"Organization {organization_id} not found",
                    )
                )

            return Return.ok(
                BalanceResponseDTO(
                    organization_id=organization.id,
                    balance=organization.credits_balance,
                    subscription_tier=organization.subscription_tier.value,
                    last_updated=organization.updated_at,
                )
            )

        except Exception as e:
            return Return.err(
                Error(
                    code="GET_BALANCE_FAILED",
                    message="Failed to retrieve balance",
                    reason=str(e),
                )
            )
