"""
HTTP client for the external auth provider.

Speaks the GoTrue REST API: token introspection for signed-in users and the
admin user-management endpoints used by signup, account repair and password
reset.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import AUTH_PROVIDER_URL, AUTH_SERVICE_ROLE_KEY, HTTP_TIMEOUT

logger = logging.getLogger(__name__)


class AuthProviderError(Exception):
    """Raised when the auth provider rejects a request or cannot be reached."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for field in ("msg", "message", "error_description", "error"):
            if body.get(field):
                return str(body[field])
    return f"HTTP {response.status_code}"


class AuthProviderClient:
    """
    Async client for the auth provider.

    Args:
        base_url: Provider root URL (the /auth/v1 prefix is added here)
        service_role_key: Key authorising admin calls
        timeout: Request timeout in seconds
        transport: Optional httpx transport, used by tests
    """

    def __init__(
        self,
        base_url: str = AUTH_PROVIDER_URL,
        service_role_key: str = AUTH_SERVICE_ROLE_KEY,
        timeout: float = HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = f"{base_url.rstrip('/')}/auth/v1"
        self.service_role_key = service_role_key
        self.timeout = timeout
        self.transport = transport

    def _admin_headers(self) -> Dict[str, str]:
        return {
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {self.service_role_key}",
        }

    async def _request(self, method: str, path: str, headers: Dict[str, str], **kwargs) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Auth provider unreachable: {e}")
            raise AuthProviderError(503, "Auth provider unavailable") from e

        if response.status_code >= 400:
            raise AuthProviderError(response.status_code, _error_message(response))
        return response.json()

    async def get_user(self, token: str) -> Dict[str, Any]:
        """
        Resolve an access token to the user it was issued for.

        Raises:
            AuthProviderError: If the token is invalid or expired
        """
        headers = {"apikey": self.service_role_key, "Authorization": f"Bearer {token}"}
        return await self._request("GET", "/user", headers)

    async def list_users(self) -> List[Dict[str, Any]]:
        data = await self._request("GET", "/admin/users", self._admin_headers())
        return data.get("users", []) if isinstance(data, dict) else data

    async def find_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """
        Find a user by email address.

        Returns:
            The user record, or None if no user has this email
        """
        wanted = email.lower()
        for user in await self.list_users():
            if (user.get("email") or "").lower() == wanted:
                return user
        return None

    async def create_user(
        self, email: str, password: str, name: str, email_confirm: bool = True
    ) -> Dict[str, Any]:
        payload = {
            "email": email,
            "password": password,
            "email_confirm": email_confirm,
            "user_metadata": {"name": name},
        }
        return await self._request("POST", "/admin/users", self._admin_headers(), json=payload)

    async def update_user(self, user_id: str, **attributes: Any) -> Dict[str, Any]:
        """
        Update a user's attributes (password, email_confirm, user_metadata...).
        """
        return await self._request(
            "PUT", f"/admin/users/{user_id}", self._admin_headers(), json=attributes
        )


provider = AuthProviderClient()


def get_auth_provider() -> AuthProviderClient:
    """Dependency function that provides the auth provider client."""
    return provider


def is_confirmed(user: Dict[str, Any]) -> bool:
    """True if the user's email address has been confirmed."""
    return bool(user.get("email_confirmed_at") or user.get("confirmed_at"))
