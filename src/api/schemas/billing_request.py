"""Request schemas for Billing, Usage, Organization and Audit APIs"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from src.domain.organization_member import MemberRole


class QuotaCheckRequestSchema(BaseModel):
    """
    Request schema for POST /usage/check
    """

    requested_units: int = Field(
        default=1,
        ge=1,
        description="Calls about to be analyzed"
    )

    storage_mb: float = Field(
        default=0,
        ge=0,
        description="Size of the audio about to be stored (MB)"
    )


class RecordUsageRequestSchema(BaseModel):
    """
    Request schema for POST /usage/record

    Sent after the analysis succeeded. call_analysis_id makes retries safe
    for pay-as-you-go organizations.
    """

    call_analysis_id: str = Field(
        ...,
        min_length=1,
        description="Identifier of the completed call analysis"
    )

    units: int = Field(default=1, ge=1)

    file_size_mb: float = Field(default=0, ge=0)

    class Config:
        json_schema_extra = {
            "example": {
                "call_analysis_id": "ca_01HZX3",
                "units": 1,
                "file_size_mb": 4.2,
            }
        }


class CreateInvitationRequestSchema(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    role: MemberRole = Field(default=MemberRole.MEMBER)


class AcceptInvitationRequestSchema(BaseModel):
    token: str = Field(..., min_length=1)


class AuditLogRequestSchema(BaseModel):
    action: str = Field(..., min_length=1, max_length=64)
    resource_type: str = Field(..., min_length=1, max_length=64)
    resource_id: Optional[str] = Field(default=None, max_length=255)
    details: Dict[str, Any] = Field(default_factory=dict)
