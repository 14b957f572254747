"""Organization API Routes"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.invitation_repository import SqlAlchemyInvitationRepository
from src.adapter.repositories.organization_member_repository import SqlAlchemyOrganizationMemberRepository
from src.adapter.repositories.organization_repository import SqlAlchemyOrganizationRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.auth import get_current_user
from src.api.error import ClientError
from src.api.schemas.billing_request import AcceptInvitationRequestSchema, CreateInvitationRequestSchema
from src.app.services.auth_provider import AuthUser
from src.app.services.notification_service import NotificationService
from src.app.use_cases.organization import (
    AcceptInvitation,
    AcceptInvitationCommandDTO,
    CreateInvitation,
    CreateInvitationCommandDTO,
    EnsureOrganization,
    EnsureOrganizationCommandDTO,
    EnsureOrganizationResultDTO,
    GetOrganization,
    InvitationDTO,
    MembershipDTO,
    OrganizationDTO,
)
from src.depends import get_notification_service, get_session

router = APIRouter(prefix="/organization", tags=["Organization"])


@router.post("/ensure", response_model=EnsureOrganizationResultDTO)
async def ensure_organization(
    user: AuthUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """
    Return the caller's organization, creating a free-tier workspace owned by
    the caller when they have none. Safe to call on every sign-in.

    **Returns:** `{organization, created}`
    """
    use_case = EnsureOrganization(
        uow=SqlAlchemyUnitOfWork(session),
        organization_repo=SqlAlchemyOrganizationRepository(session),
        member_repo=SqlAlchemyOrganizationMemberRepository(session),
    )
    result = await use_case.execute(
        EnsureOrganizationCommandDTO(user_id=user.id, user_email=user.email, user_name=user.name)
    )
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/me", response_model=OrganizationDTO)
async def get_my_organization(
    user: AuthUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    use_case = GetOrganization(
        SqlAlchemyOrganizationRepository(session),
        SqlAlchemyOrganizationMemberRepository(session),
    )
    result = await use_case.execute(user.id)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post("/invitations", response_model=InvitationDTO, status_code=status.HTTP_201_CREATED)
async def create_invitation(
    request: CreateInvitationRequestSchema,
    user: AuthUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    notification_service: NotificationService = Depends(get_notification_service),
):
    """Invite a teammate; seats are limited by the plan."""
    use_case = CreateInvitation(
        uow=SqlAlchemyUnitOfWork(session),
        organization_repo=SqlAlchemyOrganizationRepository(session),
        member_repo=SqlAlchemyOrganizationMemberRepository(session),
        invitation_repo=SqlAlchemyInvitationRepository(session),
        notification_service=notification_service,
        ttl_days=ApplicationConfig.INVITATION_TTL_DAYS,
    )
    result = await use_case.execute(
        CreateInvitationCommandDTO(
            inviter_id=user.id,
            inviter_email=user.email,
            email=request.email,
            role=request.role,
        )
    )
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post("/invitations/accept", response_model=MembershipDTO)
async def accept_invitation(
    request: AcceptInvitationRequestSchema,
    user: AuthUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Join an organization. A token works once."""
    use_case = AcceptInvitation(
        uow=SqlAlchemyUnitOfWork(session),
        member_repo=SqlAlchemyOrganizationMemberRepository(session),
        invitation_repo=SqlAlchemyInvitationRepository(session),
    )
    result = await use_case.execute(
        AcceptInvitationCommandDTO(token=request.token, user_id=user.id, user_email=user.email)
    )
    if result.is_err():
        raise ClientError(result.error)
    return result.value
