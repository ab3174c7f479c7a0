"""
Order submission: turns the cart into a single order-creation call.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

import httpx

from .. import schemas
from ..clients.storefront_client import StorefrontClient
from .cart import Cart
from .state import Notifier, Page, ViewState

logger = logging.getLogger(__name__)


class CheckoutFlow:
    """
    Checkout for the signed-in user.

    Args:
        client: API client carrying the user's bearer token
        cart: The cart to check out
        view: View state to update on success
        notifier: Sink for user-facing notifications
    """

    def __init__(self, client: StorefrontClient, cart: Cart, view: ViewState, notifier: Notifier):
        self.client = client
        self.cart = cart
        self.view = view
        self.notifier = notifier

    def _prompt_sign_in(self) -> None:
        self.notifier.error("Please sign in to checkout")
        self.view.show_auth_prompt = True

    def begin_checkout(self) -> bool:
        """
        Move from the cart to the checkout page.

        Returns:
            False (and an auth prompt) when nobody is signed in
        """
        if not self.client.authenticated:
            self._prompt_sign_in()
            return False
        self.view.navigate(Page.CHECKOUT)
        return True

    def build_order(self, payment_method: schemas.PaymentMethod) -> schemas.OrderCreate:
        """
        Assemble the order payload from the current cart.
        """
        now = datetime.now(timezone.utc)
        return schemas.OrderCreate(
            items=self.cart.snapshot(),
            total=self.cart.total,
            payment_method=payment_method,
            order_number=schemas.order_number_for(int(now.timestamp() * 1000)),
            timestamp=now,
        )

    async def submit(self, payment_method: schemas.PaymentMethod) -> Optional[schemas.Order]:
        """
        Place the order. On success the cart is cleared and the receipt shown;
        on failure the cart is left as it was.

        Returns:
            The created order, or None if it was not placed
        """
        if not self.client.authenticated:
            self._prompt_sign_in()
            return None

        if not (payment_method.bank_name and payment_method.account_name and payment_method.account_number):
            self.notifier.error("Please fill in all bank account fields")
            return None

        order = self.build_order(payment_method)
        try:
            created = await self.client.create_order(order)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Create order error: {e}")
            self.notifier.error("Failed to process order")
            return None

        self.cart.clear()
        self.view.show_receipt(created.order)
        self.notifier.success("Payment verified successfully!")
        logger.info(f"Order {created.order_id} placed ({created.order.order_number})")
        return created.order
