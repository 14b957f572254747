"""HTTP Auth Provider Implementation

Resolves bearer tokens against the hosted auth service
(GET {auth_url}/auth/v1/user).
"""

import logging
from typing import Optional
import httpx
from src.app.services.auth_provider import AuthProvider, AuthUser

logger = logging.getLogger(__name__)


class HttpAuthProvider(AuthProvider):

    def __init__(
        self,
        auth_url: str,
        api_key: str = "",
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.auth_url = auth_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    async def get_current_user(self, access_token: str) -> Optional[AuthUser]:
        headers = {"Authorization": f"Bearer {access_token}"}
        if self.api_key:
            headers["apikey"] = self.api_key

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(f"{self.auth_url}/auth/v1/user", headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Auth provider unreachable: {e}")
            return None

        if response.status_code != 200:
            return None

        data = response.json()
        if not data.get("id") or not data.get("email"):
            return None
        metadata = data.get("user_metadata") or {}
        return AuthUser(id=data["id"], email=data["email"], name=metadata.get("full_name"))
