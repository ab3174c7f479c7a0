"""
HTTP client for the storefront API.

Used by the client-side flows (checkout, order history, admin monitor).
Responses with an error status raise httpx.HTTPStatusError; bodies that are
not JSON or do not match the expected schema raise ValueError.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from .. import schemas
from ..config import HTTP_TIMEOUT, STOREFRONT_API_URL

logger = logging.getLogger(__name__)


class StorefrontClient:
    """
    Async client for the storefront API.

    Args:
        base_url: API root URL
        token: Bearer token of the signed-in user, if any
        timeout: Request timeout in seconds
        transport: Optional httpx transport (e.g. ASGITransport in tests)
    """

    def __init__(
        self,
        base_url: str = STOREFRONT_API_URL,
        token: Optional[str] = None,
        timeout: float = HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.token = token
        self.timeout = timeout
        self.transport = transport

    @property
    def authenticated(self) -> bool:
        return bool(self.token)

    def _headers(self) -> Optional[Dict[str, str]]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else None

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self.transport
        ) as client:
            response = await client.request(method, path, headers=self._headers(), **kwargs)
            response.raise_for_status()
            return response.json()

    # Accounts

    async def sign_up(self, email: str, password: str, name: str) -> Dict[str, Any]:
        return await self._request("POST", "/signup", json={"email": email, "password": password, "name": name})

    async def get_profile(self) -> Optional[schemas.Profile]:
        """
        Get the signed-in user's profile.

        Returns:
            Profile, or None when signed out or the token was rejected
        """
        if not self.authenticated:
            return None
        try:
            data = await self._request("GET", "/profile")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Get current user error: {e}")
            return None
        return schemas.Profile.model_validate(data["profile"])

    async def request_password_reset(self, email: str) -> Dict[str, Any]:
        return await self._request("POST", "/request-password-reset", json={"email": email})

    async def reset_password(self, email: str, reset_code: str, new_password: str) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/reset-password",
            json={"email": email, "resetCode": reset_code, "newPassword": new_password},
        )

    # Favorites

    async def get_favorites(self) -> List[str]:
        """
        Get the signed-in user's favorites.

        Returns:
            List of item ids; empty when signed out or on any error
        """
        if not self.authenticated:
            return []
        try:
            data = await self._request("GET", "/favorites")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Get favorites error: {e}")
            return []
        return data.get("favorites", [])

    async def add_favorite(self, item_id: str) -> List[str]:
        data = await self._request("POST", "/favorites", json={"itemId": item_id})
        return data["favorites"]

    async def remove_favorite(self, item_id: str) -> List[str]:
        data = await self._request("DELETE", f"/favorites/{item_id}")
        return data["favorites"]

    # Orders

    async def create_order(self, order: schemas.OrderCreate) -> schemas.OrderCreated:
        data = await self._request("POST", "/orders", json=order.model_dump(mode="json", by_alias=True))
        return schemas.OrderCreated.model_validate(data)

    async def get_user_orders(self) -> List[schemas.OrderRecord]:
        data = await self._request("GET", "/orders")
        return schemas.OrderList.model_validate(data).orders

    async def get_admin_orders(self) -> List[schemas.OrderRecord]:
        data = await self._request("GET", "/admin/orders")
        return schemas.OrderList.model_validate(data).orders

    async def update_order_status(self, order_id: str, status: str) -> schemas.Order:
        data = await self._request("PUT", f"/admin/orders/{order_id}", json={"status": status})
        return schemas.OrderUpdated.model_validate(data).order

    # Payment details

    async def get_payment_details(self) -> schemas.PaymentDetails:
        data = await self._request("GET", "/payment-details")
        return schemas.PaymentDetailsResponse.model_validate(data).details

    async def update_payment_details(self, details: schemas.PaymentDetails) -> Dict[str, Any]:
        return await self._request(
            "POST", "/payment-details", json={"details": details.model_dump(mode="json", by_alias=True)}
        )
