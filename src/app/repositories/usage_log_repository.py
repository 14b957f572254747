"""Usage Log Repository Interface"""

from abc import ABC, abstractmethod
from src.domain.usage_log import UsageLog


class UsageLogRepository(ABC):

    @abstractmethod
    async def create(self, entry: UsageLog) -> UsageLog:
        pass
