from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class UsageEventDTO(BaseModel):
    organization_id: str
    user_id: Optional[str] = None
    action_type: str = "call_analyzed"
    resource_type: Optional[str] = None
    resource_id: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)


class AccessEventDTO(BaseModel):
    user_id: str
    organization_id: Optional[str] = None
    action: str
    resource_type: str
    resource_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
