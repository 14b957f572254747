"""Organization Member Domain Entity"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import UniqueConstraint
from src.domain.base import BaseModel, BigIntId


class MemberRole(str, Enum):
    """Roles, highest privilege first"""
    OWNER = "owner"
    ADMIN = "admin"
    MANAGER = "manager"
    MEMBER = "member"
    VIEWER = "viewer"


# Roles allowed to invite new members
INVITING_ROLES = frozenset({MemberRole.OWNER, MemberRole.ADMIN, MemberRole.MANAGER})


class OrganizationMember(BaseModel, table=True):
    """
    Organization Member - Links an auth user to an organization

    Domain Rules:
    - (organization_id, user_id) is unique; a user joins an organization once
    - email is copied from the auth provider so receipts can be addressed
      without a round trip to it
    """

    __tablename__ = "organization_members"
    __table_args__ = (
        UniqueConstraint('organization_id', 'user_id', name='uq_organization_members_org_user'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntId, primary_key=True, autoincrement=True),
    )

    organization_id: str = Field(
        foreign_key="organizations.id",
        index=True,
    )

    user_id: str = Field(index=True)

    email: str = Field(description="Member email address")

    role: MemberRole = Field(default=MemberRole.MEMBER)

    invited_by: Optional[str] = Field(default=None)

    joined_at: datetime = Field(default_factory=datetime.utcnow)
