"""Unit tests for RecordActivity

Activity logging never raises into the caller.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.audit import AccessEventDTO, RecordActivity, UsageEventDTO


@pytest.fixture
def mock_usage_log_repo():
    repo = MagicMock()
    repo.create = AsyncMock(side_effect=lambda entry: entry)
    return repo


@pytest.fixture
def mock_audit_log_repo():
    repo = MagicMock()
    repo.create = AsyncMock(side_effect=lambda entry: entry)
    return repo


@pytest.fixture
def recorder(mock_uow, mock_usage_log_repo, mock_audit_log_repo):
    return RecordActivity(mock_uow, mock_usage_log_repo, mock_audit_log_repo)


@pytest.mark.asyncio
class TestRecordActivity:

    async def test_usage_event_is_stored(self, recorder, mock_uow, mock_usage_log_repo):
        stored = await recorder.record_usage(
            UsageEventDTO(organization_id="org_123", user_id="u1", resource_id="ca_1", details={"units": 1})
        )

        assert stored is True
        entry = mock_usage_log_repo.create.call_args.args[0]
        assert entry.action_type == "call_analyzed"
        assert entry.details == {"units": 1}
        mock_uow.commit.assert_called_once()

    async def test_access_event_keeps_client_details(self, recorder, mock_audit_log_repo):
        stored = await recorder.record_access(
            AccessEventDTO(
                user_id="u1",
                action="view",
                resource_type="call_analysis",
                resource_id="ca_1",
                ip_address="203.0.113.7",
                user_agent="pytest",
            )
        )

        assert stored is True
        entry = mock_audit_log_repo.create.call_args.args[0]
        assert entry.details["ip_address"] == "203.0.113.7"
        assert entry.details["user_agent"] == "pytest"

    async def test_storage_failure_returns_false(self, recorder, mock_uow, mock_usage_log_repo):
        mock_usage_log_repo.create = AsyncMock(side_effect=RuntimeError("disk full"))

        stored = await recorder.record_usage(UsageEventDTO(organization_id="org_123"))

        assert stored is False
        mock_uow.rollback.assert_called_once()

    async def test_failed_rollback_is_swallowed(self, recorder, mock_uow, mock_audit_log_repo):
        mock_audit_log_repo.create = AsyncMock(side_effect=RuntimeError("connection lost"))
        mock_uow.rollback = AsyncMock(side_effect=RuntimeError("connection lost"))

        stored = await recorder.record_access(
            AccessEventDTO(user_id="u1", action="export", resource_type="report")
        )

        assert stored is False
