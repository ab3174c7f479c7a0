from decimal import Decimal

from storefront import catalog
from storefront.frontend.cart import Cart


def test_total_for_two_jollof_and_one_samosa():
    cart = Cart()
    jollof = catalog.get_item("1")
    cart.add(jollof)
    cart.add(jollof)
    cart.add(catalog.get_item("10"))

    assert cart.total == Decimal("2200")
    assert cart.item_count == 3
    assert len(cart) == 2


def test_update_quantity_ignores_values_below_one():
    cart = Cart()
    cart.add(catalog.get_item("5"))
    cart.update_quantity("5", 3)
    cart.update_quantity("5", 0)
    assert cart.lines["5"].quantity == 3
    assert cart.total == Decimal("4500")


def test_remove_and_clear():
    cart = Cart()
    cart.add(catalog.get_item("1"))
    cart.add(catalog.get_item("11"))
    cart.remove("1")
    assert list(cart.lines) == ["11"]
    cart.clear()
    assert cart.is_empty
    assert cart.total == Decimal("0")


def test_snapshot_carries_menu_prices():
    cart = Cart()
    cart.add(catalog.get_item("12"))
    [item] = cart.snapshot()
    assert item.id == "12"
    assert item.name == "Fried Meat"
    assert item.price == Decimal("500")
    assert item.category == "addon"
