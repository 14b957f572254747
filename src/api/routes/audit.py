"""Audit API Routes"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Header, Request
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.audit_log_repository import SqlAlchemyAuditLogRepository
from src.adapter.repositories.organization_repository import SqlAlchemyOrganizationRepository
from src.adapter.repositories.usage_log_repository import SqlAlchemyUsageLogRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.auth import get_current_user
from src.api.schemas.billing_request import AuditLogRequestSchema
from src.app.services.auth_provider import AuthUser
from src.app.use_cases.audit import AccessEventDTO, RecordActivity
from src.depends import get_session

router = APIRouter(prefix="/audit", tags=["Audit"])


def client_ip(request: Request, forwarded_for: Optional[str]) -> Optional[str]:
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else None


async def record_access(
    session: AsyncSession,
    request: Request,
    user: AuthUser,
    action: str,
    resource_type: str,
    resource_id: Optional[str] = None,
    organization_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> bool:
    """Store a data-access event for a server-side action; never raises"""
    recorder = RecordActivity(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyUsageLogRepository(session),
        SqlAlchemyAuditLogRepository(session),
    )
    return await recorder.record_access(
        AccessEventDTO(
            user_id=user.id,
            organization_id=organization_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            ip_address=client_ip(request, request.headers.get("x-forwarded-for")),
            user_agent=request.headers.get("user-agent"),
            details=details or {},
        )
    )


@router.post("/log")
async def log_access(
    body: AuditLogRequestSchema,
    request: Request,
    x_forwarded_for: Optional[str] = Header(default=None),
    user_agent: Optional[str] = Header(default=None),
    user: AuthUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """
    Record a data-access event.

    Always answers 200; `success` is false when the entry could not be stored.
    """
    organization = await SqlAlchemyOrganizationRepository(session).get_for_user(user.id)
    recorder = RecordActivity(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyUsageLogRepository(session),
        SqlAlchemyAuditLogRepository(session),
    )
    stored = await recorder.record_access(
        AccessEventDTO(
            user_id=user.id,
            organization_id=organization.id if organization else None,
            action=body.action,
            resource_type=body.resource_type,
            resource_id=body.resource_id,
            ip_address=client_ip(request, x_forwarded_for),
            user_agent=user_agent,
            details=body.details,
        )
    )
    return {"success": stored}
