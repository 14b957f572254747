"""ListCreditTransactions Use Case"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.credit_transaction_repository import CreditTransactionRepository
from .dtos import ListTransactionsResponseDTO, TransactionDTO

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class ListCreditTransactions:
    """
    Use Case: Credit history of an organization, newest first

    The idempotency key is exposed as `reference` so a purchase can be
    matched to its payment id and a usage charge to its call analysis.
    """

    def __init__(self, transaction_repo: CreditTransactionRepository):
        self.transaction_repo = transaction_repo

    async def execute(
        self, organization_id: str, limit: int = 20, offset: int = 0
    ) -> Result[ListTransactionsResponseDTO]:
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        offset = max(offset, 0)
        try:
            page = await self.transaction_repo.list_by_organization(
                organization_id=organization_id, limit=limit, offset=offset
            )
            total = await self.transaction_repo.count_by_organization(organization_id)
        except Exception as e:
            logger.error(f"Failed to list credit transactions of {organization_id}: {e}")
            return Return.err(
                Error(code="LIST_TRANSACTIONS_FAILED", message="Failed to list transactions", reason=str(e))
            )

        return Return.ok(
            ListTransactionsResponseDTO(
                transactions=[
                    TransactionDTO(
                        id=entry.id,
                        transaction_type=entry.transaction_type.value,
                        delta=entry.delta,
                        balance_after=entry.balance_after,
                        amount_paid=entry.amount_paid,
                        currency=entry.currency,
                        description=entry.description,
                        reference=entry.idempotency_key,
                        created_at=entry.created_at,
                    )
                    for entry in page
                ],
                total=total,
                limit=limit,
                offset=offset,
            )
        )
