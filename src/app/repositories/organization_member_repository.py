"""Organization Member Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.organization_member import OrganizationMember


class OrganizationMemberRepository(ABC):

    @abstractmethod
    async def get_by_user_id(self, user_id: str) -> Optional[OrganizationMember]:
        """Membership of a user (a user belongs to at most one organization)"""
        pass

    @abstractmethod
    async def get(self, organization_id: str, user_id: str) -> Optional[OrganizationMember]:
        pass

    @abstractmethod
    async def count_by_organization(self, organization_id: str) -> int:
        pass

    @abstractmethod
    async def create(self, member: OrganizationMember) -> OrganizationMember:
        """
        Raises:
            IntegrityError: If the user is already a member of the organization
        """
        pass
