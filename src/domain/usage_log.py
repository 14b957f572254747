"""Usage Log Domain Entity"""

from datetime import datetime
from typing import Any, Dict, Optional
from sqlmodel import Field, Column
from sqlalchemy import JSON, String
from src.domain.base import BaseModel, BigIntId


class UsageLog(BaseModel, table=True):
    """Append-only record of a billable action (e.g. call_analyzed)"""

    __tablename__ = "usage_logs"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntId, primary_key=True, autoincrement=True),
    )

    organization_id: str = Field(index=True)

    user_id: Optional[str] = Field(default=None)

    action_type: str = Field(sa_column=Column(String(64), nullable=False))

    resource_type: Optional[str] = Field(
        default=None,
        sa_column=Column(String(64), nullable=True),
    )

    resource_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
    )

    details: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False, default=dict),
    )

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
