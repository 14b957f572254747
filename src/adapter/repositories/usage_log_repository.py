from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.usage_log_repository import UsageLogRepository
from src.domain.usage_log import UsageLog


class SqlAlchemyUsageLogRepository(UsageLogRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entry: UsageLog) -> UsageLog:
        self.session.add(entry)
        await self.session.flush()
        return entry
