"""
Operator commands for the storefront key-value store.

Usage:
    python -m storefront.manage grant-admin <user_id>
    python -m storefront.manage revoke-admin <user_id>
    python -m storefront.manage set-payment-details --bank-name ... --account-name ... --account-number ...
"""
import argparse
import asyncio
import logging
from typing import List, Optional

from . import crud, schemas
from .kv_store import KVStore, store

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storefront.manage",
        description="Manage administrators and payment details",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    grant = subparsers.add_parser("grant-admin", help="Mark a user as administrator")
    grant.add_argument("user_id")

    revoke = subparsers.add_parser("revoke-admin", help="Remove a user's administrator flag")
    revoke.add_argument("user_id")

    payment = subparsers.add_parser("set-payment-details", help="Set the shop bank account")
    payment.add_argument("--bank-name", required=True)
    payment.add_argument("--account-name", required=True)
    payment.add_argument("--account-number", required=True)
    return parser


async def run(args: argparse.Namespace, kv: KVStore) -> str:
    """
    Execute a parsed command against the store.

    Returns:
        A one-line summary of what was done
    """
    if args.command == "grant-admin":
        await crud.set_admin(kv, args.user_id, True)
        return f"Granted administrator to {args.user_id}"
    if args.command == "revoke-admin":
        await crud.set_admin(kv, args.user_id, False)
        return f"Revoked administrator from {args.user_id}"

    details = schemas.PaymentDetails(
        bank_name=args.bank_name,
        account_name=args.account_name,
        account_number=args.account_number,
    )
    await crud.set_payment_details(kv, details)
    return f"Payment details set to {details.bank_name} {details.account_number}"


async def _main(args: argparse.Namespace) -> str:
    try:
        return await run(args, store)
    finally:
        await store.close()


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)
    logger.info(asyncio.run(_main(args)))


if __name__ == "__main__":
    main()
