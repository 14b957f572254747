"""SQLAlchemy implementation of PaymentReceiptRepository"""

from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.payment_receipt_repository import PaymentReceiptRepository
from src.domain.payment_receipt import PaymentReceipt


class SqlAlchemyPaymentReceiptRepository(PaymentReceiptRepository):
    """
    SQLAlchemy implementation of PaymentReceiptRepository

    Duplicate payment_id inserts surface as IntegrityError at flush time.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, receipt: PaymentReceipt) -> PaymentReceipt:
        self.session.add(receipt)
        await self.session.flush()
        await self.session.refresh(receipt)
        return receipt

    async def get_by_payment_id(self, payment_id: str) -> Optional[PaymentReceipt]:
        stmt = select(PaymentReceipt).where(PaymentReceipt.payment_id == payment_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_invoice_number(self, invoice_number: str) -> Optional[PaymentReceipt]:
        stmt = select(PaymentReceipt).where(PaymentReceipt.invoice_number == invoice_number)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
