"""Credit Transaction Repository Interface

Defines the contract for credit transaction persistence operations.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from src.domain.credit_transaction import CreditTransaction


class CreditTransactionRepository(ABC):
    """
    Repository interface for CreditTransaction persistence

    Transactions are immutable and append-only.
    Idempotency is enforced via unique idempotency_key.
    """

    @abstractmethod
    async def create(self, transaction: CreditTransaction) -> CreditTransaction:
        """
        Create a new credit transaction

        Args:
            transaction: CreditTransaction entity to persist

        Returns:
            Created CreditTransaction with generated ID

        Raises:
            IntegrityError: If idempotency_key already exists (duplicate transaction)
        """
        pass

    @abstractmethod
    async def get_by_idempotency_key(self, idempotency_key: str) -> Optional[CreditTransaction]:
        """
        Retrieve transaction by idempotency key

        Args:
            idempotency_key: Unique idempotency key

        Returns:
            CreditTransaction if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_id(self, transaction_id: int) -> Optional[CreditTransaction]:
        pass

    @abstractmethod
    async def list_by_organization(
        self, organization_id: str, limit: int, offset: int
    ) -> List[CreditTransaction]:
        """Transactions of an organization, newest first"""
        pass

    @abstractmethod
    async def count_by_organization(self, organization_id: str) -> int:
        pass

    @abstractmethod
    async def sum_deltas_by_organization(self) -> Dict[str, int]:
        """
        Sum of delta per organization

        Returns:
            Mapping organization_id -> sum(delta) for every organization with
            at least one transaction
        """
        pass
