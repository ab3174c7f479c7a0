"""
Key-value store operations for the storefront service.

Orders are kept under three key families: the order record itself
(order:<ms>:<userId>), the owner's index (user:<userId>:orders) and the
global admin index (admin:orders). Indices are append-only lists.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from . import schemas
from .kv_store import KVStore

logger = logging.getLogger(__name__)

ADMIN_ORDERS_KEY = "admin:orders"
PAYMENT_DETAILS_KEY = "payment:details"

DEFAULT_PAYMENT_DETAILS = {
    "bankName": "First Bank of Nigeria",
    "accountName": "Sacy's Kitchen",
    "accountNumber": "0123456789",
    "creditCardName": "Sacy's Kitchen",
    "creditCardNumber": "**** **** **** 1234",
}


def user_orders_key(user_id: str) -> str:
    return f"user:{user_id}:orders"


def favorites_key(user_id: str) -> str:
    return f"user:{user_id}:favorites"


def profile_key(user_id: str) -> str:
    return f"user:{user_id}:profile"


def admin_flag_key(user_id: str) -> str:
    return f"admin:{user_id}"


def reset_key(email: str) -> str:
    return f"reset:{email.lower()}"


def make_order_key(created_at: datetime, user_id: str) -> str:
    """Order key from the creation time (epoch milliseconds) and owner."""
    return f"order:{int(created_at.timestamp() * 1000)}:{user_id}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


# Orders

async def create_order(
    kv: KVStore, order: schemas.OrderCreate, user_id: str, user_email: Optional[str]
) -> Tuple[str, schemas.Order]:
    """
    Create a new order and add it to the owner's and the admin index.

    The three writes are sequential and not transactional: a failure after
    the first leaves an order record that no index lists.

    Args:
        kv: Key-value store
        order: Order data as submitted by the client
        user_id: Owner of the order
        user_email: Owner's email address

    Returns:
        Tuple of (order_id, stored order)
    """
    created_at = _now()
    order_id = make_order_key(created_at, user_id)

    data = order.model_dump()
    if not data.get("order_number"):
        data["order_number"] = schemas.order_number_for(int(created_at.timestamp() * 1000))
    db_order = schemas.Order(
        **data,
        user_id=user_id,
        user_email=user_email,
        status="pending",
        created_at=created_at,
    )

    await kv.set(order_id, db_order.model_dump_json(by_alias=True))
    await kv.append(user_orders_key(user_id), order_id)
    await kv.append(ADMIN_ORDERS_KEY, order_id)

    logger.info(f"Created order {order_id} ({db_order.order_number}) total {db_order.total}")
    return order_id, db_order


async def get_order(kv: KVStore, order_id: str) -> Optional[schemas.Order]:
    """
    Retrieve a single order by key.

    Returns:
        Order or None if not found or the key holds something else
    """
    if not order_id.startswith("order:"):
        return None
    raw = await kv.get(order_id)
    if raw is None:
        return None
    try:
        return schemas.Order.model_validate_json(raw)
    except ValidationError:
        logger.warning(f"Key {order_id} does not hold an order record")
        return None


async def _load_orders(kv: KVStore, order_ids: List[str]) -> List[schemas.OrderRecord]:
    orders = []
    for order_id in order_ids:
        order = await get_order(kv, order_id)
        if order is None:
            # Index entry without a record
            logger.warning(f"Skipping dangling order reference {order_id}")
            continue
        orders.append(schemas.OrderRecord(**order.model_dump(), order_id=order_id))
    return orders


async def get_user_orders(kv: KVStore, user_id: str) -> List[schemas.OrderRecord]:
    """
    Retrieve a user's orders, newest first.
    """
    orders = await _load_orders(kv, await kv.members(user_orders_key(user_id)))
    orders.sort(key=lambda o: o.created_at, reverse=True)
    return orders


async def get_all_orders(kv: KVStore) -> List[schemas.OrderRecord]:
    """
    Retrieve every order in the admin index, oldest first.
    """
    return await _load_orders(kv, await kv.members(ADMIN_ORDERS_KEY))


async def update_order_status(kv: KVStore, order_id: str, status: str) -> Optional[schemas.Order]:
    """
    Overwrite an order's status and stamp its update time.

    Returns:
        Updated Order or None if not found
    """
    db_order = await get_order(kv, order_id)
    if db_order is None:
        return None

    db_order.status = status
    db_order.updated_at = _now()
    await kv.set(order_id, db_order.model_dump_json(by_alias=True))
    return db_order


# Favorites

async def get_favorites(kv: KVStore, user_id: str) -> List[str]:
    return await kv.get_json(favorites_key(user_id), [])


async def add_favorite(kv: KVStore, user_id: str, item_id: str) -> List[str]:
    """
    Add an item to the user's favorites if it is not already there.

    Returns:
        The updated favorites list
    """
    favorites = await get_favorites(kv, user_id)
    if item_id not in favorites:
        favorites.append(item_id)
        await kv.set_json(favorites_key(user_id), favorites)
    return favorites


async def remove_favorite(kv: KVStore, user_id: str, item_id: str) -> List[str]:
    favorites = [f for f in await get_favorites(kv, user_id) if f != item_id]
    await kv.set_json(favorites_key(user_id), favorites)
    return favorites


# Profiles and administrators

async def get_profile(kv: KVStore, user_id: str) -> Optional[Dict[str, Any]]:
    return await kv.get_json(profile_key(user_id))


async def ensure_user_records(kv: KVStore, user_id: str, name: str, email: str) -> None:
    """
    Initialise a user's favorites and profile unless they already exist.
    """
    if not await kv.exists(favorites_key(user_id)):
        await kv.set_json(favorites_key(user_id), [])
    if not await kv.exists(profile_key(user_id)):
        await kv.set_json(profile_key(user_id), {
            "name": name,
            "email": email,
            "createdAt": _now().isoformat(),
        })


async def is_admin(kv: KVStore, user_id: str) -> bool:
    return await kv.exists(admin_flag_key(user_id))


async def set_admin(kv: KVStore, user_id: str, enabled: bool = True) -> None:
    """Grant or revoke the administrator flag."""
    if enabled:
        await kv.set_json(admin_flag_key(user_id), True)
    else:
        await kv.delete(admin_flag_key(user_id))


# Payment details

async def get_payment_details(kv: KVStore) -> Dict[str, Any]:
    return await kv.get_json(PAYMENT_DETAILS_KEY, DEFAULT_PAYMENT_DETAILS)


async def set_payment_details(kv: KVStore, details: schemas.PaymentDetails) -> None:
    await kv.set(PAYMENT_DETAILS_KEY, details.model_dump_json(by_alias=True))


# Password reset codes

async def save_reset_code(kv: KVStore, email: str, code_hash: str, expires_at_ms: int) -> None:
    await kv.set_json(reset_key(email), {"codeHash": code_hash, "expiresAt": expires_at_ms})


async def get_reset_code(kv: KVStore, email: str) -> Optional[Dict[str, Any]]:
    return await kv.get_json(reset_key(email))


async def delete_reset_code(kv: KVStore, email: str) -> None:
    await kv.delete(reset_key(email))
