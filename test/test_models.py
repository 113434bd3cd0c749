from decimal import Decimal

import pytest

from _helper import ADDRESS, COLA, FRIES, PIZZA, make_items
from order_tracker.exceptions import ValidationError
from order_tracker.models import FoodCategory, MenuItem, Order
from order_tracker.order_state import DELIVERED, PENDING, PREPARING, OrderStatus, StatusKind


def _order(**overrides) -> Order:
    kwargs = dict(customer_id="cust-1", restaurant_id="rest-1", items=make_items(), delivery_address=ADDRESS)
    kwargs.update(overrides)
    return Order(**kwargs)


@pytest.mark.parametrize(
    "overrides",
    [
        {"customer_id": ""},
        {"customer_id": "   "},
        {"restaurant_id": ""},
        {"restaurant_id": "\t"},
        {"items": {}},
        {"items": {PIZZA: 0}},
        {"items": {PIZZA: 1, COLA: -2}},
    ],
)
def test_invalid_construction(overrides):
    with pytest.raises(ValidationError):
        _order(**overrides)


def test_new_order_is_pending():
    order = _order(special_instructions="No onions")
    assert order.status == PENDING
    assert order.created_at == order.updated_at
    assert order.special_instructions == "No onions"
    assert order.id


def test_ids_are_unique():
    assert _order().id != _order().id


def test_items_are_copied():
    items = make_items()
    order = _order(items=items)
    items[FRIES] = 3
    items[PIZZA] = 10
    assert dict(order.items) == {PIZZA: 1, COLA: 2}
    assert items == {PIZZA: 10, COLA: 2, FRIES: 3}
    with pytest.raises(TypeError):
        order.items[FRIES] = 1


def test_status_is_read_only():
    order = _order()
    with pytest.raises(AttributeError):
        order.status = DELIVERED


def test_calculate_total():
    assert _order().calculate_total() == Decimal("410.00")
    assert _order(items={FRIES: 3}).calculate_total() == Decimal("298.50")


def test_menu_item_price_coercion_and_validation():
    item = MenuItem("x", "Tea", "", 12.5, FoodCategory.BEVERAGE)
    assert item.price == Decimal("12.5")
    with pytest.raises(ValidationError):
        MenuItem("y", "Bad", "", Decimal("-1"), FoodCategory.DESSERT)


def test_update_status_valid_and_invalid():
    order = _order()
    assert order.update_status(PREPARING)
    assert order.status == PREPARING
    before = order.updated_at
    assert not order.update_status(PREPARING)
    assert not order.update_status(DELIVERED)
    assert order.status == PREPARING
    assert order.updated_at == before


def test_final_order_rejects_everything():
    order = _order()
    assert order.update_status(OrderStatus.cancelled("Changed my mind"))
    status, updated_at = order.status, order.updated_at
    for target in (PENDING, PREPARING, DELIVERED, OrderStatus.cancelled("Other")):
        assert not order.update_status(target)
    assert order.status == status
    assert order.status.reason == "Changed my mind"
    assert order.updated_at == updated_at


def test_summary():
    order = _order()
    lines = order.summary().splitlines()
    assert lines == [
        f"Order {order.id}",
        "Status: Pending",
        "Items: Pizza x1, Cola x2",
        "Total: Rs 410.00",
    ]
    order.update_status(OrderStatus.cancelled("Late"))
    assert "Status: Cancelled: Late" in order.summary()
    assert order.status.kind is StatusKind.CANCELLED
