"""SQLAlchemy implementation of InvitationRepository"""

from datetime import datetime
from typing import Optional
from sqlalchemy import func, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invitation_repository import InvitationRepository
from src.domain.invitation import Invitation


class SqlAlchemyInvitationRepository(InvitationRepository):
    """
    SQLAlchemy implementation of InvitationRepository

    Acceptance is a conditional UPDATE (WHERE accepted_at IS NULL) so only one
    of two racing requests can consume a token.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, invitation: Invitation) -> Invitation:
        self.session.add(invitation)
        await self.session.flush()
        await self.session.refresh(invitation)
        return invitation

    async def get_pending_by_token(self, token: str, now: datetime) -> Optional[Invitation]:
        stmt = select(Invitation).where(
            Invitation.token == token,
            Invitation.accepted_at.is_(None),
            Invitation.expires_at > now,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_accepted(self, invitation_id: int, accepted_at: datetime) -> bool:
        stmt = (
            update(Invitation)
            .where(Invitation.id == invitation_id)
            .where(Invitation.accepted_at.is_(None))
            .values(accepted_at=accepted_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def count_pending(self, organization_id: str, now: datetime) -> int:
        stmt = select(func.count()).select_from(Invitation).where(
            Invitation.organization_id == organization_id,
            Invitation.accepted_at.is_(None),
            Invitation.expires_at > now,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()
