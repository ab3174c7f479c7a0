"""
The signed-in user's past orders.
"""
import logging
from typing import List, Optional

import httpx

from .. import schemas
from ..clients.storefront_client import StorefrontClient
from .state import Notifier, ViewState

logger = logging.getLogger(__name__)


class OrderHistory:
    def __init__(self, client: StorefrontClient, view: ViewState, notifier: Notifier):
        self.client = client
        self.view = view
        self.notifier = notifier
        self.orders: List[schemas.OrderRecord] = []

    async def load(self) -> List[schemas.OrderRecord]:
        """
        Fetch the user's orders (newest first). On failure the previous list is kept.
        """
        try:
            self.orders = await self.client.get_user_orders()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Get orders error: {e}")
            self.notifier.error("Failed to load orders")
        return self.orders

    def view_receipt(self, order_id: str) -> Optional[schemas.OrderRecord]:
        for order in self.orders:
            if order.order_id == order_id:
                self.view.show_receipt(order)
                return order
        return None
