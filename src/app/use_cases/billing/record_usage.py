"""RecordUsage Use Case

Charges a completed billable action: credits for pay-as-you-go, the call
counter for every other tier.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.organization_repository import OrganizationRepository
from src.domain.credit_transaction import TransactionType
from src.domain.organization import SubscriptionTier
from .apply_credit_delta import ApplyCreditDelta
from .dtos import ApplyCreditDeltaCommandDTO, RecordUsageCommandDTO, RecordUsageResponseDTO

logger = logging.getLogger(__name__)


class RecordUsage:
    """
    Use Case: Record usage after a billable action succeeded

    Business Rules:
    1. Pay-as-you-go: deduct `units` credits through the ledger with key
       usage:<call_analysis_id>, so a retried record never charges twice
    2. Other tiers: atomically increment calls_used and storage_used_mb
    3. No reservation is taken at check time; concurrent requests can
       over-admit by the number of in-flight actions
    """

    def __init__(
        self,
        uow: UnitOfWork,
        organization_repo: OrganizationRepository,
        apply_credit_delta: ApplyCreditDelta,
    ):
        self.uow = uow
        self.organization_repo = organization_repo
        self.apply_credit_delta = apply_credit_delta

    async def execute(self, command: RecordUsageCommandDTO) -> Result[RecordUsageResponseDTO]:
        try:
            organization = await self.organization_repo.get_by_id(command.organization_id)
            if not organization:
                return Return.err(
                    Error(
                        code="ORGANIZATION_NOT_FOUND",
                        message=f"Organization {command.organization_id} not found",
                    )
                )

            tier = organization.subscription_tier
            if tier == SubscriptionTier.PAYG:
                charged = await self.apply_credit_delta.execute(
                    ApplyCreditDeltaCommandDTO(
                        organization_id=organization.id,
                        delta=-command.units,
                        transaction_type=TransactionType.USAGE,
                        description=f"Call analysis {command.call_analysis_id}",
                        idempotency_key=f"usage:{command.call_analysis_id}",
                        user_id=command.user_id,
                        details={"call_analysis_id": command.call_analysis_id},
                    )
                )
                if charged.is_err():
                    return Return.err(charged.error)

                if command.file_size_mb:
                    await self.organization_repo.increment_usage(
                        organization.id, 0, command.file_size_mb
                    )
                    await self.uow.commit()

                return Return.ok(
                    RecordUsageResponseDTO(
                        organization_id=organization.id,
                        subscription_tier=tier.value,
                        calls_recorded=command.units,
                        credits_charged=0 if charged.value.already_processed else command.units,
                        credits_balance=charged.value.balance_after,
                    )
                )

            await self.organization_repo.increment_usage(
                organization.id, command.units, command.file_size_mb
            )
            await self.uow.commit()

            return Return.ok(
                RecordUsageResponseDTO(
                    organization_id=organization.id,
                    subscription_tier=tier.value,
                    calls_recorded=command.units,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to record usage for {command.organization_id}: {e}")
            return Return.err(
                Error(
                    code="RECORD_USAGE_FAILED",
                    message="Failed to record usage",
                    reason=str(e),
                )
            )
