"""Ledger Reconciliation Background Worker

Checks on a schedule that every organization's credits_balance equals the
sum of its credit transactions. Discrepancies are logged, never repaired.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from src.adapter.repositories.organization_repository import SqlAlchemyOrganizationRepository
from src.app.use_cases.billing import ReconcileLedger, ReconciliationResultDTO

logger = logging.getLogger(__name__)


class LedgerReconcilerWorker:
    """
    Background worker for credit ledger reconciliation

    Usage:
        worker = LedgerReconcilerWorker()
        result = await worker.run_once()

        await worker.run_forever(interval_seconds=86400)
    """

    def __init__(self, db_uri: Optional[str] = None, session_factory=None):
        """
        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
            session_factory: Existing async session factory; when given no
                engine is created and shutdown() leaves it alone
        """
        self.engine = None
        if session_factory is None:
            self.engine = create_async_engine(db_uri or ApplicationConfig.DB_URI, echo=False, future=True)
            session_factory = sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
            )
        self.async_session_factory = session_factory

    async def run_once(self) -> ReconciliationResultDTO:
        if not ApplicationConfig.RECONCILIATION_ENABLED:
            logger.info("Ledger reconciliation is disabled, skipping")
            return ReconciliationResultDTO(
                total_organizations_checked=0,
                discrepancies_found=0,
                reconciliation_time=datetime.utcnow(),
                execution_time_ms=0,
            )

        async with self.async_session_factory() as session:
            use_case = ReconcileLedger(
                organization_repo=SqlAlchemyOrganizationRepository(session),
                transaction_repo=SqlAlchemyCreditTransactionRepository(session),
            )
            result = await use_case.execute()

        if result.is_err():
            raise RuntimeError(f"Reconciliation failed: {result.error.reason or result.error.message}")

        response = result.value
        if response.discrepancies_found:
            logger.error(f"ALERT: {response.discrepancies_found} organization balances disagree with their ledger")
            for d in response.discrepancies:
                logger.error(
                    f"  - Organization {d.organization_id}: balance={d.credits_balance}, "
                    f"ledger={d.calculated_balance}, diff={d.discrepancy}"
                )
        return response

    async def run_forever(self, interval_seconds: Optional[int] = None):
        interval = interval_seconds or ApplicationConfig.RECONCILIATION_INTERVAL_SECONDS
        logger.info(f"Starting ledger reconciliation every {interval}s")

        while True:
            try:
                result = await self.run_once()
                logger.info(
                    f"Reconciliation cycle complete: {result.total_organizations_checked} organizations, "
                    f"{result.discrepancies_found} discrepancies, {result.execution_time_ms}ms"
                )
            except Exception as e:
                logger.error(f"Reconciliation cycle failed: {e}")

            await asyncio.sleep(interval)

    async def shutdown(self):
        if self.engine is not None:
            await self.engine.dispose()
        logger.info("LedgerReconcilerWorker shutdown complete")


async def main():
    """
    python -m src.worker.ledger_reconciler [--once] [--interval SECONDS]
    """
    import argparse

    logging.basicConfig(
        level=getattr(logging, str(ApplicationConfig.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Credit ledger reconciliation")
    parser.add_argument("--once", action="store_true", help="Run once and exit")
    parser.add_argument("--interval", type=int, default=None, help="Seconds between runs")
    args = parser.parse_args()

    worker = LedgerReconcilerWorker()
    try:
        if args.once:
            result = await worker.run_once()
            print(
                f"Checked {result.total_organizations_checked} organizations, "
                f"{result.discrepancies_found} discrepancies ({result.execution_time_ms}ms)"
            )
            for d in result.discrepancies:
                print(f"  {d.organization_id}: balance={d.credits_balance} ledger={d.calculated_balance}")
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
