"""Organization and team use cases"""
from .get_organization import GetOrganization
from .create_invitation import CreateInvitation
from .accept_invitation import AcceptInvitation
from .ensure_organization import EnsureOrganization
from .dtos import (
    OrganizationDTO,
    CreateInvitationCommandDTO,
    InvitationDTO,
    AcceptInvitationCommandDTO,
    MembershipDTO,
    EnsureOrganizationCommandDTO,
    EnsureOrganizationResultDTO,
)

__all__ = [
    "GetOrganization",
    "CreateInvitation",
    "AcceptInvitation",
    "EnsureOrganization",
    "OrganizationDTO",
    "CreateInvitationCommandDTO",
    "InvitationDTO",
    "AcceptInvitationCommandDTO",
    "MembershipDTO",
    "EnsureOrganizationCommandDTO",
    "EnsureOrganizationResultDTO",
]
