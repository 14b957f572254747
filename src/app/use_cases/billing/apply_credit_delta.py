"""ApplyCreditDelta Use Case

The single writer of organizations.credits_balance and credit_transactions.
Every purchase, usage charge, refund and expiry goes through here.
"""

import logging
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.organization_repository import OrganizationRepository
from src.app.repositories.credit_transaction_repository import CreditTransactionRepository
from src.domain.credit_transaction import CreditTransaction
from .dtos import ApplyCreditDeltaCommandDTO, LedgerEntryDTO

logger = logging.getLogger(__name__)


class ApplyCreditDelta:
    """
    Use Case: Change an organization's credit balance exactly once

    Business Rules:
    1. Idempotency: a key that was already applied returns the stored
       transaction with already_processed=True and writes nothing
    2. Non-negative balance: a deduction larger than the balance fails with
       INSUFFICIENT_CREDITS and writes nothing
    3. Atomicity: the balance increment and the transaction row are written
       in one database transaction
    4. Races: the unique idempotency_key lets only one of two concurrent
       writers commit; the loser rolls back and returns the winner's row

    Flow:
    1. Check idempotency (return existing if found)
    2. Atomic guarded UPDATE of credits_balance
    3. Insert transaction with balance_after
    4. Commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        organization_repo: OrganizationRepository,
        transaction_repo: CreditTransactionRepository,
    ):
        self.uow = uow
        self.organization_repo = organization_repo
        self.transaction_repo = transaction_repo

    async def execute(self, command: ApplyCreditDeltaCommandDTO) -> Result[LedgerEntryDTO]:
        """
        Apply a signed credit delta

        Args:
            command: ApplyCreditDeltaCommandDTO

        Returns:
            Result[LedgerEntryDTO]: The (new or previously stored) ledger entry
        """
        try:
            if command.idempotency_key:
                existing = await self.transaction_repo.get_by_idempotency_key(
                    command.idempotency_key
                )
                if existing:
                    return Return.ok(self._to_dto(existing, already_processed=True))

            organization = await self.organization_repo.get_by_id(command.organization_id)
            if not organization:
                return Return.err(
                    Error(
                        code="ORGANIZATION_NOT_FOUND",
                        message=f"Organization {command.organization_id} not found",
                    )
                )

            new_balance = await self.organization_repo.increment_credits(
                command.organization_id, command.delta
            )
            if new_balance is None:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="INSUFFICIENT_CREDITS",
                        message=f"Insufficient credits. Required: {-command.delta}, "
                                f"Available: {organization.credits_balance}",
                        reason=f"balance={organization.credits_balance}, delta={command.delta}",
                    )
                )

            transaction = CreditTransaction(
                organization_id=command.organization_id,
                user_id=command.user_id,
                transaction_type=command.transaction_type,
                delta=command.delta,
                balance_after=new_balance,
                amount_paid=command.amount_paid,
                currency=command.currency,
                description=command.description,
                details=command.details,
                idempotency_key=command.idempotency_key,
            )
            created = await self.transaction_repo.create(transaction)
            await self.uow.commit()

            logger.info(
                f"Applied {command.transaction_type.value} delta {command.delta:+d} to "
                f"organization {command.organization_id}, balance now {new_balance}"
            )
            return Return.ok(self._to_dto(created))

        except IntegrityError:
            # Another writer committed the same idempotency key first
            await self.uow.rollback()
            existing = None
            if command.idempotency_key:
                try:
                    existing = await self.transaction_repo.get_by_idempotency_key(
                        command.idempotency_key
                    )
                except Exception as e:
                    logger.error(f"Re-reading idempotency key {command.idempotency_key} failed: {e}")
                    return Return.err(
                        Error(
                            code="APPLY_CREDIT_FAILED",
                            message="Failed to apply credit change",
                            reason=str(e),
                        )
                    )
            if existing:
                logger.info(
                    f"Idempotency key {command.idempotency_key} already applied by a concurrent writer"
                )
                return Return.ok(self._to_dto(existing, already_processed=True))
            return Return.err(
                Error(
                    code="APPLY_CREDIT_FAILED",
                    message="Failed to apply credit change",
                    reason="integrity violation without a matching transaction",
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to apply credit delta for {command.organization_id}: {e}")
            return Return.err(
                Error(
                    code="APPLY_CREDIT_FAILED",
                    message="Failed to apply credit change",
                    reason=str(e),
                )
            )

    @staticmethod
    def _to_dto(transaction: CreditTransaction, already_processed: bool = False) -> LedgerEntryDTO:
        return LedgerEntryDTO(
            transaction_id=transaction.id,
            organization_id=transaction.organization_id,
            transaction_type=transaction.transaction_type.value,
            delta=transaction.delta,
            balance_after=transaction.balance_after,
            amount_paid=transaction.amount_paid,
            currency=transaction.currency,
            description=transaction.description,
            idempotency_key=transaction.idempotency_key,
            created_at=transaction.created_at,
            already_processed=already_processed,
        )
