"""Auth Provider Interface"""

from abc import ABC, abstractmethod
from typing import Optional
from pydantic import BaseModel


class AuthUser(BaseModel):
    id: str
    email: str
    name: Optional[str] = None


class AuthProvider(ABC):

    @abstractmethod
    async def get_current_user(self, access_token: str) -> Optional[AuthUser]:
        """
        Resolve a bearer token to a user

        Returns:
            AuthUser if the token is valid, None otherwise
        """
        pass
