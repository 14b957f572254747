"""CheckQuota Use Case

Decides whether an organization may perform a billable action. Applies any
pending period reset first; never increments usage.
"""

import logging
from datetime import datetime
from typing import Callable
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.organization_repository import OrganizationRepository
from src.domain.organization import Organization, SubscriptionTier
from src.domain.subscription_plan import TIER_ALLOWANCES, add_billing_interval
from .dtos import QuotaCheckCommandDTO, QuotaDecisionDTO

logger = logging.getLogger(__name__)


def evaluate_quota(
    organization: Organization, requested_units: int = 1, storage_mb: float = 0
) -> QuotaDecisionDTO:
    """
    Pure admission decision

    allowed = current_used + requested_units <= limit (the boundary is
    inclusive). Pay-as-you-go draws on credits: current_used is 0 and limit is
    the credit balance.
    """
    tier = organization.subscription_tier
    if tier == SubscriptionTier.PAYG:
        current_used = 0
        limit = organization.credits_balance
    else:
        current_used = organization.calls_used
        limit = organization.calls_limit

    remaining = max(limit - current_used, 0)
    allowed = current_used + requested_units <= limit
    reason = None if allowed else (
        "INSUFFICIENT_CREDITS" if tier == SubscriptionTier.PAYG else "CALL_LIMIT_REACHED"
    )

    if allowed and storage_mb:
        if float(organization.storage_used_mb) + storage_mb > organization.storage_limit_mb:
            allowed = False
            reason = "STORAGE_LIMIT_REACHED"

    if allowed and not organization.is_active:
        allowed = False
        reason = "ORGANIZATION_INACTIVE"

    return QuotaDecisionDTO(
        allowed=allowed,
        current_used=current_used,
        limit=limit,
        remaining=remaining,
        subscription_tier=tier.value,
        reason=reason,
    )


class CheckQuota:
    """
    Use Case: Check quota before a billable action

    Business Rules:
    1. Free tier counters reset daily (daily_reset_date < today)
    2. Paid tier counters reset when current_period_end has passed; the
       period rolls forward by whole billing intervals
    3. The check itself is read-only; RecordUsage increments after the
       action succeeded
    """

    def __init__(
        self,
        uow: UnitOfWork,
        organization_repo: OrganizationRepository,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.uow = uow
        self.organization_repo = organization_repo
        self.clock = clock

    async def execute(self, command: QuotaCheckCommandDTO) -> Result[QuotaDecisionDTO]:
        try:
            organization = await self.organization_repo.get_by_id(command.organization_id)
            if not organization:
                return Return.err(
                    Error(
                        code="ORGANIZATION_NOT_FOUND",
                        message=f"Organization {command.organization_id} not found",
                    )
                )

            if await self._reset_if_due(organization):
                await self.uow.commit()
                organization = await self.organization_repo.get_by_id(command.organization_id)

            return Return.ok(
                evaluate_quota(organization, command.requested_units, command.storage_mb)
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Quota check failed for {command.organization_id}: {e}")
            return Return.err(
                Error(
                    code="QUOTA_CHECK_FAILED",
                    message="Failed to check quota",
                    reason=str(e),
                )
            )

    async def _reset_if_due(self, organization: Organization) -> bool:
        now = self.clock()
        tier = organization.subscription_tier

        if tier == SubscriptionTier.PAYG:
            return False

        if TIER_ALLOWANCES[tier].daily_reset:
            today = now.date()
            if organization.daily_reset_date is None or organization.daily_reset_date < today:
                await self.organization_repo.reset_daily_usage(organization.id, today)
                logger.info(f"Daily usage reset for organization {organization.id}")
                return True
            return False

        period_end = organization.current_period_end
        if period_end is None or period_end > now:
            return False

        start = period_end
        end = add_billing_interval(start, organization.billing_interval)
        while end <= now:
            start, end = end, add_billing_interval(end, organization.billing_interval)

        await self.organization_repo.reset_period_usage(organization.id, start, end)
        logger.info(
            f"Billing period rolled forward for organization {organization.id}: "
            f"{start.isoformat()} - {end.isoformat()}"
        )
        return True
