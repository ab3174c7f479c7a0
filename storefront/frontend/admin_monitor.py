"""
Admin order monitor.

There is no push channel, so the monitor polls the admin order list on a
fixed interval and compares the order count with the previous poll to
announce new orders.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import httpx

from .. import schemas
from ..clients.storefront_client import StorefrontClient
from ..config import ADMIN_POLL_INTERVAL_SECONDS
from .state import Notifier

logger = logging.getLogger(__name__)

ORDER_FILTERS = ("all", "pending", "completed", "cancelled")


def new_orders_message(count: int) -> str:
    return f"{count} new order{'s' if count > 1 else ''} received!"


@dataclass
class PollState:
    """
    Polling session state; lives from start() to stop().

    Attributes:
        previous_count: Order count seen by the last successful poll, None before the first
        new_orders: Orders announced by the latest notification, until dismissed
    """
    previous_count: Optional[int] = None
    new_orders: int = 0


class AdminOrderMonitor:
    """
    Live-ish view of all orders for an administrator.

    Args:
        client: API client carrying an administrator's bearer token
        notifier: Sink for user-facing notifications
        interval: Seconds between polls
    """

    def __init__(
        self,
        client: StorefrontClient,
        notifier: Notifier,
        interval: float = ADMIN_POLL_INTERVAL_SECONDS,
    ):
        self.client = client
        self.notifier = notifier
        self.interval = interval
        self.orders: List[schemas.OrderRecord] = []
        self.state: Optional[PollState] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def poll(self, state: PollState) -> int:
        """
        Fetch all orders once and compare the count with the previous poll.

        The first poll of a session only records the baseline.

        Returns:
            Number of new orders announced (0 if none or the poll failed)
        """
        try:
            orders = await self.client.get_admin_orders()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Get admin orders error: {e}")
            self.notifier.error("Failed to load orders")
            return 0

        self.orders = orders
        count = len(orders)
        new_count = 0
        if state.previous_count is not None and count > state.previous_count:
            new_count = count - state.previous_count
            state.new_orders = new_count
            self.notifier.success(new_orders_message(new_count))
        state.previous_count = count
        return new_count

    async def refresh(self) -> int:
        """Poll now, outside the regular interval."""
        if self.state is None:
            self.state = PollState()
        return await self.poll(self.state)

    async def _run(self, state: PollState) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.poll(state)

    async def start(self) -> None:
        """
        Activate the monitor: establish the baseline, then poll every interval.
        """
        if self.running:
            return
        self.state = PollState()
        await self.poll(self.state)
        self._task = asyncio.create_task(self._run(self.state))

    async def stop(self) -> None:
        """Deactivate the monitor and discard its polling state."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self.state = None

    def dismiss(self) -> None:
        if self.state is not None:
            self.state.new_orders = 0

    def filtered(self, status_filter: str = "all") -> List[schemas.OrderRecord]:
        """
        Orders from the last poll matching a status filter. Makes no request.
        """
        if status_filter == "all":
            return list(self.orders)
        return [order for order in self.orders if order.status == status_filter]

    def counts(self) -> Dict[str, int]:
        return {f: len(self.filtered(f)) for f in ORDER_FILTERS}

    async def update_status(self, order_id: str, status: str) -> bool:
        """
        Change an order's status, then re-poll immediately.

        On failure the local list is left as is until the next poll.

        Returns:
            True if the update succeeded
        """
        try:
            await self.client.update_order_status(order_id, status)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Update order error: {e}")
            self.notifier.error("Failed to update order status")
            return False

        self.notifier.success("Order status updated")
        await self.refresh()
        return True
