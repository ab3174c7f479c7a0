"""
Static menu catalog.
"""
from decimal import Decimal
from typing import Dict, List, NamedTuple, Optional


class MenuItem(NamedTuple):
    id: str
    name: str
    description: str
    price: Decimal
    category: str  # main, addon or drink


MENU_ITEMS: List[MenuItem] = [
    MenuItem("1", "Jollof Rice", "Classic Nigerian Jollof rice with rich tomato sauce and spices", Decimal("1000"), "main"),
    MenuItem("2", "Pounded Yam and Vegetable Soup", "Pounded and soup with stock fish and pomo", Decimal("1700"), "main"),
    MenuItem("3", "Pounded Yam and Egusi soup", "Smooth pounded yam served with rich soup", Decimal("1700"), "main"),
    MenuItem("4", "Pounded Yam and Ogbono soup", "Sharp Ogbono soup together with Pounded Yam", Decimal("1700"), "main"),
    MenuItem("5", "Semo and Egusi soup", "Sharp Egusi soup together with semo", Decimal("1500"), "main"),
    MenuItem("6", "Semo and Ogbono soup", "Sharp Ogbono soup together with semo", Decimal("1500"), "main"),
    MenuItem("7", "Semo and Vegetable soup", "Vegetable soup together with semo", Decimal("1500"), "main"),
    MenuItem("8", "Indomie no egg", "Indomie noodles without egg", Decimal("700"), "main"),
    MenuItem("9", "Moi Moi and stew", "Steamed bean pudding served with stew", Decimal("500"), "main"),
    MenuItem("10", "Samosa", "Crispy pastry with savoury filling", Decimal("200"), "main"),
    MenuItem("11", "Fried egg", "Add a fried egg to your meal", Decimal("300"), "addon"),
    MenuItem("12", "Fried Meat", "Add fried meat to your meal", Decimal("500"), "addon"),
    MenuItem("13", "Coleslaw/salad", "Fresh coleslaw or salad on the side", Decimal("500"), "addon"),
]

_BY_ID: Dict[str, MenuItem] = {item.id: item for item in MENU_ITEMS}


def get_item(item_id: str) -> Optional[MenuItem]:
    return _BY_ID.get(item_id)


def items_in_category(category: str) -> List[MenuItem]:
    """Menu items in a category; "all" returns the whole menu."""
    if category == "all":
        return list(MENU_ITEMS)
    return [item for item in MENU_ITEMS if item.category == category]
