"""SQLAlchemy implementation of OrganizationRepository

Balance and usage counters are changed with single UPDATE statements
(x = x + n) so concurrent requests never overwrite each other.
"""

from datetime import date, datetime
from typing import List, Optional
from sqlalchemy import or_, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.organization_repository import OrganizationRepository
from src.domain.organization import Organization
from src.domain.organization_member import OrganizationMember


class SqlAlchemyOrganizationRepository(OrganizationRepository):
    """
    SQLAlchemy implementation of OrganizationRepository

    Features:
    - Atomic guarded credit increments (balance can never go negative)
    - Atomic usage increments
    - Conditional period resets (no-op when another request already reset)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, organization_id: str) -> Optional[Organization]:
        # Counters change through bulk UPDATEs, so never serve a stale identity-map copy
        stmt = (
            select(Organization)
            .where(Organization.id == organization_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_for_user(self, user_id: str) -> Optional[Organization]:
        stmt = (
            select(Organization)
            .join(OrganizationMember, OrganizationMember.organization_id == Organization.id)
            .where(OrganizationMember.user_id == user_id)
            .order_by(OrganizationMember.joined_at)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, organization: Organization) -> Organization:
        self.session.add(organization)
        await self.session.flush()
        await self.session.refresh(organization)
        return organization

    async def update(self, organization: Organization) -> Organization:
        organization.updated_at = datetime.utcnow()
        self.session.add(organization)
        await self.session.flush()
        return organization

    async def increment_credits(self, organization_id: str, delta: int) -> Optional[int]:
        """
        Atomically add delta to credits_balance

        Args:
            organization_id: Organization ID
            delta: Signed credit change

        Returns:
            New balance, or None when no row matched (unknown organization or
            the balance would drop below zero)
        """
        stmt = (
            update(Organization)
            .where(Organization.id == organization_id)
            .where(Organization.credits_balance + delta >= 0)
            .values(
                credits_balance=Organization.credits_balance + delta,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return None

        # The updated row stays locked until commit, so this read is ours
        balance = await self.session.execute(
            select(Organization.credits_balance).where(Organization.id == organization_id)
        )
        return balance.scalar_one()

    async def increment_usage(self, organization_id: str, calls: int, storage_mb: float) -> None:
        stmt = (
            update(Organization)
            .where(Organization.id == organization_id)
            .values(
                calls_used=Organization.calls_used + calls,
                storage_used_mb=Organization.storage_used_mb + storage_mb,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def reset_daily_usage(self, organization_id: str, today: date) -> None:
        stmt = (
            update(Organization)
            .where(Organization.id == organization_id)
            .where(or_(
                Organization.daily_reset_date.is_(None),
                Organization.daily_reset_date < today,
            ))
            .values(calls_used=0, daily_reset_date=today, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def reset_period_usage(
        self, organization_id: str, period_start: datetime, period_end: datetime
    ) -> None:
        stmt = (
            update(Organization)
            .where(Organization.id == organization_id)
            .where(or_(
                Organization.current_period_end.is_(None),
                Organization.current_period_end < period_end,
            ))
            .values(
                calls_used=0,
                current_period_start=period_start,
                current_period_end=period_end,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def get_all(self) -> List[Organization]:
        result = await self.session.execute(select(Organization).order_by(Organization.created_at))
        return list(result.scalars().all())
