from typing import Dict


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def order_payload(items=None, total=None) -> dict:
    """Order body as the web client sends it; defaults to Jollof Rice x2 + Samosa."""
    items = items if items is not None else [
        {"id": "1", "name": "Jollof Rice", "price": 1000, "quantity": 2},
        {"id": "10", "name": "Samosa", "price": 200, "quantity": 1},
    ]
    if total is None:
        total = sum(item["price"] * item["quantity"] for item in items)
    return {
        "items": items,
        "total": total,
        "paymentMethod": {
            "type": "bank-account",
            "bankName": "GTBank",
            "accountName": "Ada Obi",
            "accountNumber": "0011223344",
        },
        "orderNumber": "ORD-12345678",
    }
