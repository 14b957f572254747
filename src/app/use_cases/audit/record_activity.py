"""RecordActivity Use Case

Append-only sink for usage and data-access audit events. Logging must never
break the action being logged, so failures are reported, not raised.
"""

import logging
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.usage_log_repository import UsageLogRepository
from src.app.repositories.audit_log_repository import AuditLogRepository
from src.domain.usage_log import UsageLog
from src.domain.audit_log import AuditLog
from .dtos import AccessEventDTO, UsageEventDTO

logger = logging.getLogger(__name__)


class RecordActivity:

    def __init__(
        self,
        uow: UnitOfWork,
        usage_log_repo: UsageLogRepository,
        audit_log_repo: AuditLogRepository,
    ):
        self.uow = uow
        self.usage_log_repo = usage_log_repo
        self.audit_log_repo = audit_log_repo

    async def record_usage(self, event: UsageEventDTO) -> bool:
        """
        Append a usage event

        Returns:
            True if stored, False if storing failed (logged)
        """
        try:
            await self.usage_log_repo.create(
                UsageLog(
                    organization_id=event.organization_id,
                    user_id=event.user_id,
                    action_type=event.action_type,
                    resource_type=event.resource_type,
                    resource_id=event.resource_id,
                    details=event.details,
                )
            )
            await self.uow.commit()
            return True
        except Exception as e:
            logger.error(f"Failed to record usage event {event.action_type} for {event.organization_id}: {e}")
            await self._rollback()
            return False

    async def record_access(self, event: AccessEventDTO) -> bool:
        """
        Append a data-access audit event (IP address and user agent go in details)

        Returns:
            True if stored, False if storing failed (logged)
        """
        details = dict(event.details)
        details["ip_address"] = event.ip_address
        details["user_agent"] = event.user_agent
        try:
            await self.audit_log_repo.create(
                AuditLog(
                    organization_id=event.organization_id,
                    user_id=event.user_id,
                    action=event.action,
                    resource_type=event.resource_type,
                    resource_id=event.resource_id,
                    details=details,
                )
            )
            await self.uow.commit()
            return True
        except Exception as e:
            logger.error(f"Failed to record audit event {event.action} by {event.user_id}: {e}")
            await self._rollback()
            return False

    async def _rollback(self) -> None:
        try:
            await self.uow.rollback()
        except Exception as e:
            logger.error(f"Rollback after failed activity write failed: {e}")
