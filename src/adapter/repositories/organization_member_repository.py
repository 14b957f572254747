"""SQLAlchemy implementation of OrganizationMemberRepository"""

from typing import Optional
from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.organization_member_repository import OrganizationMemberRepository
from src.domain.organization_member import OrganizationMember


class SqlAlchemyOrganizationMemberRepository(OrganizationMemberRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_id(self, user_id: str) -> Optional[OrganizationMember]:
        stmt = (
            select(OrganizationMember)
            .where(OrganizationMember.user_id == user_id)
            .order_by(OrganizationMember.joined_at)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get(self, organization_id: str, user_id: str) -> Optional[OrganizationMember]:
        stmt = select(OrganizationMember).where(
            OrganizationMember.organization_id == organization_id,
            OrganizationMember.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def count_by_organization(self, organization_id: str) -> int:
        stmt = select(func.count()).select_from(OrganizationMember).where(
            OrganizationMember.organization_id == organization_id
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def create(self, member: OrganizationMember) -> OrganizationMember:
        self.session.add(member)
        await self.session.flush()
        await self.session.refresh(member)
        return member
