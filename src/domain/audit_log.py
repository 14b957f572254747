"""Data Access Audit Log Domain Entity"""

from datetime import datetime
from typing import Any, Dict, Optional
from sqlmodel import Field, Column
from sqlalchemy import JSON, String
from src.domain.base import BaseModel, BigIntId


class AuditLog(BaseModel, table=True):
    """
    Audit Log - Who touched which resource

    Entries are append-only and carry the caller's IP address and user agent
    in details.
    """

    __tablename__ = "data_access_logs"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntId, primary_key=True, autoincrement=True),
    )

    organization_id: Optional[str] = Field(default=None, index=True)

    user_id: str = Field(index=True)

    action: str = Field(sa_column=Column(String(64), nullable=False))

    resource_type: str = Field(sa_column=Column(String(64), nullable=False))

    resource_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
    )

    details: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False, default=dict),
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
