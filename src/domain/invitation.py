"""Invitation Domain Entity"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import String
from src.domain.base import BaseModel, BigIntId
from src.domain.organization_member import MemberRole


class Invitation(BaseModel, table=True):
    """
    Invitation - Single-use token granting membership of an organization

    Domain Rules:
    - token is unique and random
    - An invitation is pending while accepted_at is NULL and expires_at is in
      the future; accepting it sets accepted_at exactly once
    """

    __tablename__ = "invitations"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntId, primary_key=True, autoincrement=True),
    )

    organization_id: str = Field(
        foreign_key="organizations.id",
        index=True,
    )

    email: str = Field(description="Invitee email address")

    role: MemberRole = Field(default=MemberRole.MEMBER)

    token: str = Field(
        sa_column=Column(String(128), unique=True, nullable=False),
    )

    invited_by: Optional[str] = Field(default=None)

    expires_at: datetime = Field(description="Invitation expiry")

    accepted_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    def is_pending(self, now: datetime) -> bool:
        return self.accepted_at is None and self.expires_at > now
