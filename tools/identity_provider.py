"""
Identity Provider
Clients for the identity/session service that owns user accounts
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx
from sqlalchemy.orm import Session

from config import get_settings
from errors import IdentityProviderError, NotAuthenticatedError
import models


logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass
class Identity:
    """A user account as reported by the identity provider"""
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "user_metadata": dict(self.user_metadata)
        }


class IdentityProvider(ABC):
    """Contract of the identity/session service"""

    @abstractmethod
    async def get_current_user(self) -> Optional[Identity]:
        """The signed-in user, or None"""

    @abstractmethod
    async def list_all_users(self) -> List[Identity]:
        """Every account (privileged); raises IdentityProviderError"""

    @abstractmethod
    async def get_user_by_id(self, user_id: str) -> Identity:
        """One account (privileged); raises IdentityProviderError"""


class DatabaseIdentityProvider(IdentityProvider):
    """
    Identity directory kept in the application database.

    The bearer token of the request is matched against users.access_token.
    """

    def __init__(self, db: Session, access_token: Optional[str] = None):
        self.db = db
        self.access_token = access_token

    async def get_current_user(self) -> Optional[Identity]:
        if not self.access_token:
            return None

        user = self.db.query(models.User).filter(
            models.User.access_token == self.access_token
        ).first()
        return self._to_identity(user) if user else None

    async def list_all_users(self) -> List[Identity]:
        users = self.db.query(models.User).order_by(models.User.created_at).all()
        return [self._to_identity(u) for u in users]

    async def get_user_by_id(self, user_id: str) -> Identity:
        user = self.db.query(models.User).filter(models.User.id == user_id).first()
        if not user:
            raise IdentityProviderError(f"User {user_id} not found")
        return self._to_identity(user)

    @staticmethod
    def _to_identity(user: models.User) -> Identity:
        return Identity(
            id=user.id,
            email=user.email,
            user_metadata=dict(user.user_metadata or {})
        )


class HttpIdentityProvider(IdentityProvider):
    """
    Client for a GoTrue-compatible auth server.

    User calls authenticate with the caller's access token; admin calls
    use the service key.
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        base_url: Optional[str] = None,
        service_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.access_token = access_token
        self.base_url = (base_url or settings.AUTH_API_URL).rstrip('/')
        self.service_key = service_key if service_key is not None else settings.AUTH_SERVICE_KEY
        self.timeout = timeout or settings.AUTH_TIMEOUT_SECONDS
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._client is None or self._client.is_closed:
            headers = {"Accept": "application/json"}
            if self.service_key:
                headers["apikey"] = self.service_key
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=headers,
                transport=self._transport
            )
        return self._client

    async def close(self):
        """Close the HTTP client"""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(self, endpoint: str, token: Optional[str]) -> httpx.Response:
        client = await self._get_client()
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        try:
            return await client.get(endpoint, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Identity provider error on {endpoint}: {e}")
            raise IdentityProviderError(str(e)) from e

    @staticmethod
    def _raise_for_status(response: httpx.Response, endpoint: str) -> None:
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise IdentityProviderError(
                f"{endpoint} returned {response.status_code}"
            ) from e

    async def get_current_user(self) -> Optional[Identity]:
        if not self.access_token:
            return None

        response = await self._request("/user", self.access_token)
        if response.status_code in (401, 403):
            return None
        self._raise_for_status(response, "/user")
        return self._to_identity(response.json())

    async def list_all_users(self) -> List[Identity]:
        response = await self._request("/admin/users", self.service_key)
        self._raise_for_status(response, "/admin/users")

        payload = response.json()
        users = payload.get("users", []) if isinstance(payload, dict) else payload
        return [self._to_identity(u) for u in users]

    async def get_user_by_id(self, user_id: str) -> Identity:
        endpoint = f"/admin/users/{user_id}"
        response = await self._request(endpoint, self.service_key)
        self._raise_for_status(response, endpoint)

        payload = response.json()
        # Some servers wrap the account as {"user": {...}}
        if isinstance(payload, dict) and "user" in payload and "id" not in payload:
            payload = payload["user"]
        return self._to_identity(payload)

    @staticmethod
    def _to_identity(payload: Dict[str, Any]) -> Identity:
        try:
            return Identity(
                id=str(payload["id"]),
                email=payload.get("email"),
                user_metadata=dict(payload.get("user_metadata") or {})
            )
        except (KeyError, TypeError) as e:
            raise IdentityProviderError(f"Malformed user payload: {e}") from e


async def require_current_user(provider: IdentityProvider) -> Identity:
    """The signed-in user; raises NotAuthenticatedError when there is none"""
    user = await provider.get_current_user()
    if user is None:
        raise NotAuthenticatedError()
    return user
