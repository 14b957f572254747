"""Invitation Repository Interface"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from src.domain.invitation import Invitation


class InvitationRepository(ABC):

    @abstractmethod
    async def create(self, invitation: Invitation) -> Invitation:
        pass

    @abstractmethod
    async def get_pending_by_token(self, token: str, now: datetime) -> Optional[Invitation]:
        """
        Retrieve an invitation that can still be accepted

        Args:
            token: Invitation token
            now: Current time, used for the expiry check

        Returns:
            Invitation if unaccepted and unexpired, None otherwise
        """
        pass

    @abstractmethod
    async def mark_accepted(self, invitation_id: int, accepted_at: datetime) -> bool:
        """
        Set accepted_at if it is still NULL

        Returns:
            True if this call accepted the invitation, False if another
            caller accepted it first
        """
        pass

    @abstractmethod
    async def count_pending(self, organization_id: str, now: datetime) -> int:
        pass
