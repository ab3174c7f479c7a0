"""
Shopping cart kept in client memory.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List

from .. import catalog, schemas


@dataclass
class CartLine:
    item: catalog.MenuItem
    quantity: int

    @property
    def subtotal(self) -> Decimal:
        return self.item.price * self.quantity


class Cart:
    """
    Cart lines keyed by menu item id, in the order items were first added.
    """

    def __init__(self):
        self.lines: Dict[str, CartLine] = {}

    def add(self, item: catalog.MenuItem) -> CartLine:
        """Add one unit of an item, creating its line if needed."""
        line = self.lines.get(item.id)
        if line is None:
            line = self.lines[item.id] = CartLine(item=item, quantity=1)
        else:
            line.quantity += 1
        return line

    def update_quantity(self, item_id: str, quantity: int) -> None:
        # Quantities below one are ignored; use remove() instead
        if quantity < 1 or item_id not in self.lines:
            return
        self.lines[item_id].quantity = quantity

    def remove(self, item_id: str) -> None:
        self.lines.pop(item_id, None)

    def clear(self) -> None:
        self.lines.clear()

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines.values())

    @property
    def total(self) -> Decimal:
        return sum((line.subtotal for line in self.lines.values()), Decimal("0"))

    def snapshot(self) -> List[schemas.OrderItem]:
        """Line items for an order payload."""
        return [
            schemas.OrderItem(
                id=line.item.id,
                name=line.item.name,
                price=line.item.price,
                quantity=line.quantity,
                description=line.item.description,
                category=line.item.category,
            )
            for line in self.lines.values()
        ]
