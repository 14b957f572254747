"""ReconcileLedger Use Case

Checks every organization's credits_balance against the sum of its
credit transaction deltas.
"""

import logging
import time
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.repositories.organization_repository import OrganizationRepository
from src.app.repositories.credit_transaction_repository import CreditTransactionRepository
from .dtos import LedgerDiscrepancyDTO, ReconciliationResultDTO

logger = logging.getLogger(__name__)


class ReconcileLedger:
    """
    Use Case: Reconcile credit balances against transactions

    Business Rules:
    1. For each organization, sum(delta) must equal credits_balance
    2. Mismatches are reported and logged, never corrected automatically
    3. Read-only
    """

    def __init__(
        self,
        organization_repo: OrganizationRepository,
        transaction_repo: CreditTransactionRepository,
    ):
        self.organization_repo = organization_repo
        self.transaction_repo = transaction_repo

    async def execute(self) -> Result[ReconciliationResultDTO]:
        start_time = time.time()
        reconciliation_time = datetime.utcnow()

        try:
            logger.info("Starting credit ledger reconciliation")

            organizations = await self.organization_repo.get_all()
            sums = await self.transaction_repo.sum_deltas_by_organization()

            discrepancies: list[LedgerDiscrepancyDTO] = []
            for organization in organizations:
                calculated = sums.get(organization.id, 0)
                if organization.credits_balance != calculated:
                    difference = organization.credits_balance - calculated
                    discrepancies.append(
                        LedgerDiscrepancyDTO(
                            organization_id=organization.id,
                            credits_balance=organization.credits_balance,
                            calculated_balance=calculated,
                            discrepancy=difference,
                        )
                    )
                    logger.warning(
                        f"Discrepancy found for organization {organization.id}: "
                        f"credits_balance={organization.credits_balance}, "
                        f"transaction_sum={calculated}, discrepancy={difference}"
                    )

            execution_time_ms = int((time.time() - start_time) * 1000)

            if discrepancies:
                logger.warning(
                    f"Reconciliation complete. Found {len(discrepancies)} discrepancies "
                    f"out of {len(organizations)} organizations in {execution_time_ms}ms"
                )
            else:
                logger.info(
                    f"Reconciliation complete. All {len(organizations)} organizations balanced "
                    f"in {execution_time_ms}ms"
                )

            return Return.ok(
                ReconciliationResultDTO(
                    total_organizations_checked=len(organizations),
                    discrepancies_found=len(discrepancies),
                    discrepancies=discrepancies,
                    reconciliation_time=reconciliation_time,
                    execution_time_ms=execution_time_ms,
                )
            )

        except Exception as e:
            logger.error(f"Ledger reconciliation failed: {e}")
            return Return.err(
                Error(
                    code="RECONCILIATION_FAILED",
                    message="Failed to reconcile credit ledger",
                    reason=str(e),
                )
            )
