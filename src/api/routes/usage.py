"""Usage API Routes

Quota check before, and usage recording after, a call analysis.
"""

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.audit_log_repository import SqlAlchemyAuditLogRepository
from src.adapter.repositories.credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from src.adapter.repositories.organization_repository import SqlAlchemyOrganizationRepository
from src.adapter.repositories.usage_log_repository import SqlAlchemyUsageLogRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.auth import get_current_organization, get_current_user
from src.api.error import ClientError
from src.api.schemas.billing_request import QuotaCheckRequestSchema, RecordUsageRequestSchema
from src.app.services.auth_provider import AuthUser
from src.app.use_cases.audit import RecordActivity, UsageEventDTO
from src.app.use_cases.billing.apply_credit_delta import ApplyCreditDelta
from src.app.use_cases.billing.check_quota import CheckQuota
from src.app.use_cases.billing.dtos import (
    QuotaCheckCommandDTO,
    QuotaDecisionDTO,
    RecordUsageCommandDTO,
    RecordUsageResponseDTO,
)
from src.app.use_cases.billing.record_usage import RecordUsage
from src.depends import get_session
from src.domain.organization import Organization

router = APIRouter(prefix="/usage", tags=["Usage"])


@router.post("/check", response_model=QuotaDecisionDTO)
async def check_quota(
    request: QuotaCheckRequestSchema,
    organization: Organization = Depends(get_current_organization),
    session: AsyncSession = Depends(get_session),
):
    """
    Can the organization analyze `requested_units` more calls?

    Never consumes quota; call `/usage/record` after the analysis succeeded.
    """
    use_case = CheckQuota(SqlAlchemyUnitOfWork(session), SqlAlchemyOrganizationRepository(session))
    result = await use_case.execute(
        QuotaCheckCommandDTO(
            organization_id=organization.id,
            requested_units=request.requested_units,
            storage_mb=request.storage_mb,
        )
    )
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post("/record", response_model=RecordUsageResponseDTO)
async def record_usage(
    request: RecordUsageRequestSchema,
    user: AuthUser = Depends(get_current_user),
    organization: Organization = Depends(get_current_organization),
    session: AsyncSession = Depends(get_session),
):
    """Charge a completed call analysis (credits or call counter)."""
    uow = SqlAlchemyUnitOfWork(session)
    organization_repo = SqlAlchemyOrganizationRepository(session)
    use_case = RecordUsage(
        uow,
        organization_repo,
        ApplyCreditDelta(uow, organization_repo, SqlAlchemyCreditTransactionRepository(session)),
    )
    result = await use_case.execute(
        RecordUsageCommandDTO(
            organization_id=organization.id,
            user_id=user.id,
            call_analysis_id=request.call_analysis_id,
            units=request.units,
            file_size_mb=request.file_size_mb,
        )
    )
    if result.is_err():
        raise ClientError(result.error)

    await RecordActivity(
        uow, SqlAlchemyUsageLogRepository(session), SqlAlchemyAuditLogRepository(session)
    ).record_usage(
        UsageEventDTO(
            organization_id=organization.id,
            user_id=user.id,
            action_type="call_analyzed",
            resource_type="call_analysis",
            resource_id=request.call_analysis_id,
            details={"units": request.units, "file_size_mb": request.file_size_mb},
        )
    )
    return result.value
