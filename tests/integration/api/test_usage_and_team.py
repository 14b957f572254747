"""Usage quota and team invitations through the HTTP API"""

import pytest
from datetime import datetime

from src.domain.organization import SubscriptionTier
from tests.integration.conftest import auth_headers

OWNER = auth_headers("user_owner", "owner@example.com")
PERIOD_END = datetime(2099, 1, 1)


@pytest.mark.asyncio
class TestUsageQuota:

    async def test_last_call_of_the_period(self, client, create_organization):
        """
        Given: An individual plan at 9 of 10 calls
        When: One more call is checked, recorded and checked again
        Then: The first check allows it, the second denies it
        """
        await create_organization(
            subscription_tier=SubscriptionTier.INDIVIDUAL,
            calls_used=9,
            calls_limit=10,
            storage_limit_mb=500,
            current_period_end=PERIOD_END,
        )

        before = await client.post("/usage/check", json={"requested_units": 1}, headers=OWNER)
        recorded = await client.post(
            "/usage/record", json={"call_analysis_id": "ca_001", "file_size_mb": 3.5}, headers=OWNER
        )
        after = await client.post("/usage/check", json={"requested_units": 1}, headers=OWNER)

        assert before.json()["allowed"] is True
        assert before.json()["remaining"] == 1
        assert recorded.status_code == 200, recorded.text
        assert recorded.json()["calls_recorded"] == 1
        assert after.json()["allowed"] is False
        assert after.json()["reason"] == "CALL_LIMIT_REACHED"

    async def test_payg_usage_spends_credits_once_per_analysis(self, client, create_organization):
        await create_organization(credits_balance=2)

        first = await client.post("/usage/record", json={"call_analysis_id": "ca_9"}, headers=OWNER)
        retry = await client.post("/usage/record", json={"call_analysis_id": "ca_9"}, headers=OWNER)
        balance = await client.get("/billing/credits/balance", headers=OWNER)
        history = await client.get("/billing/credits/transactions", headers=OWNER)

        assert first.status_code == 200, first.text
        assert retry.status_code == 200
        assert balance.json()["balance"] == 1
        assert history.json()["total"] == 1
        assert history.json()["transactions"][0]["reference"] == "usage:ca_9"

    async def test_invalid_body_is_a_validation_error(self, client, create_organization):
        await create_organization()

        response = await client.post("/usage/check", json={"requested_units": 0}, headers=OWNER)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_missing_identity_is_unauthorized(self, client):
        response = await client.get("/billing/credits/balance")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
class TestInvitations:

    async def test_invitation_works_once(self, client, notifications, create_organization):
        await create_organization(subscription_tier=SubscriptionTier.TEAM, users_limit=10)

        created = await client.post(
            "/organization/invitations", json={"email": "Analyst@Example.com"}, headers=OWNER
        )
        token = created.json()["token"]
        analyst = auth_headers("user_analyst", "analyst@example.com")

        accepted = await client.post("/organization/invitations/accept", json={"token": token}, headers=analyst)
        replayed = await client.post("/organization/invitations/accept", json={"token": token}, headers=analyst)
        me = await client.get("/organization/me", headers=analyst)

        assert created.status_code == 201, created.text
        assert notifications.invitations == [("analyst@example.com", token)]
        assert accepted.status_code == 200, accepted.text
        assert accepted.json()["role"] == "member"
        assert replayed.status_code == 404
        assert replayed.json()["error"]["code"] == "INVITATION_NOT_FOUND"
        assert me.json()["role"] == "member"

    async def test_seat_limit(self, client, create_organization):
        await create_organization(subscription_tier=SubscriptionTier.INDIVIDUAL, users_limit=1)

        response = await client.post(
            "/organization/invitations", json={"email": "second@example.com"}, headers=OWNER
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "SEAT_LIMIT_REACHED"
