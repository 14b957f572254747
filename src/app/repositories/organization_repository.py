"""Organization Repository Interface

Defines the contract for organization persistence, including the atomic
counter updates the ledger and quota engine depend on.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import List, Optional
from src.domain.organization import Organization


class OrganizationRepository(ABC):
    """
    Repository interface for Organization persistence

    Balance and usage counters are only changed through single-statement
    increments so concurrent writers never lose updates.
    """

    @abstractmethod
    async def get_by_id(self, organization_id: str) -> Optional[Organization]:
        pass

    @abstractmethod
    async def get_for_user(self, user_id: str) -> Optional[Organization]:
        """
        Retrieve the organization the user belongs to

        Args:
            user_id: Auth user ID

        Returns:
            Organization if the user is a member of one, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, organization: Organization) -> Organization:
        pass

    @abstractmethod
    async def update(self, organization: Organization) -> Organization:
        pass

    @abstractmethod
    async def increment_credits(self, organization_id: str, delta: int) -> Optional[int]:
        """
        Atomically add delta to credits_balance

        Executes UPDATE ... SET credits_balance = credits_balance + delta
        guarded by credits_balance + delta >= 0.

        Args:
            organization_id: Organization ID
            delta: Signed credit change

        Returns:
            New balance, or None if the organization does not exist or the
            balance would go negative (nothing is written in that case)
        """
        pass

    @abstractmethod
    async def increment_usage(self, organization_id: str, calls: int, storage_mb: float) -> None:
        """Atomically add to calls_used and storage_used_mb"""
        pass

    @abstractmethod
    async def reset_daily_usage(self, organization_id: str, today: date) -> None:
        pass

    @abstractmethod
    async def reset_period_usage(
        self, organization_id: str, period_start: datetime, period_end: datetime
    ) -> None:
        pass

    @abstractmethod
    async def get_all(self) -> List[Organization]:
        pass
