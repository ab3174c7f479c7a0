"""
Business-rule validation for orders.

Provides checks beyond schema validation. They are only enforced when the
corresponding setting is enabled.
"""
from decimal import Decimal
from typing import Iterable, List, Tuple

from . import catalog, schemas

# Terminal states have no outgoing transitions
VALID_TRANSITIONS = {
    "pending": ["completed", "cancelled"],
    "completed": [],
    "cancelled": [],
}


def calculate_total(items: Iterable[schemas.OrderItem]) -> Decimal:
    """Sum of price x quantity over all line items."""
    return sum((Decimal(str(item.price)) * item.quantity for item in items), Decimal("0"))


def validate_order_total(items: List[schemas.OrderItem], claimed_total: Decimal) -> Tuple[bool, str]:
    """
    Validate that the order total matches the sum of item prices.

    Args:
        items: List of order items
        claimed_total: The total claimed by the client

    Returns:
        Tuple of (is_valid, error_message)
    """
    calculated_total = calculate_total(items)
    if calculated_total != claimed_total:
        return False, f"Order total mismatch: calculated {calculated_total}, claimed {claimed_total}"
    return True, ""


def validate_catalog_prices(items: List[schemas.OrderItem]) -> Tuple[bool, str]:
    """
    Validate line items against the menu catalog.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not items:
        return False, "Order must contain at least one item"

    for item in items:
        menu_item = catalog.get_item(item.id)
        if menu_item is None:
            return False, f"Unknown menu item '{item.id}'"
        if Decimal(str(item.price)) != menu_item.price:
            return False, f"Item {item.id}: price {item.price} does not match menu price {menu_item.price}"
    return True, ""


def validate_status_transition(old_status: str, new_status: str) -> Tuple[bool, str]:
    """
    Validate that a status transition is allowed.

    Args:
        old_status: Current order status
        new_status: New order status

    Returns:
        Tuple of (is_valid, error_message)
    """
    if old_status not in VALID_TRANSITIONS:
        return False, f"Unknown status: {old_status}"

    if new_status not in VALID_TRANSITIONS:
        return False, f"Unknown status: {new_status}"

    if old_status == new_status:
        return True, ""

    if new_status not in VALID_TRANSITIONS[old_status]:
        return False, f"Invalid status transition: {old_status} -> {new_status}"

    return True, ""
