"""Data Transfer Objects for Organization Use Cases"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from src.domain.organization_member import MemberRole


class OrganizationDTO(BaseModel):
    id: str
    name: str
    subscription_tier: str
    subscription_status: str
    billing_interval: str
    calls_used: int
    calls_limit: int
    storage_used_mb: float
    storage_limit_mb: int
    users_limit: int
    credits_balance: int
    current_period_end: Optional[datetime] = None
    role: str


class CreateInvitationCommandDTO(BaseModel):
    inviter_id: str
    inviter_email: str
    email: str = Field(..., min_length=3)
    role: MemberRole = MemberRole.MEMBER


class InvitationDTO(BaseModel):
    id: int
    organization_id: str
    email: str
    role: str
    token: str
    expires_at: datetime


class AcceptInvitationCommandDTO(BaseModel):
    token: str = Field(..., min_length=1)
    user_id: str
    user_email: str


class MembershipDTO(BaseModel):
    organization_id: str
    user_id: str
    role: str
    joined_at: datetime


class EnsureOrganizationCommandDTO(BaseModel):
    user_id: str
    user_email: str
    user_name: Optional[str] = None


class EnsureOrganizationResultDTO(BaseModel):
    organization: OrganizationDTO
    created: bool = False
