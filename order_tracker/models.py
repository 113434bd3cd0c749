"""
Order entity and its value types. Order status only changes through Order.update_status,
which consults the state machine in order_state.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from order_tracker.config import settings
from order_tracker.exceptions import ValidationError
from order_tracker.order_state import PENDING, OrderStatus, display_name, is_final, is_valid_transition


class FoodCategory(str, Enum):
    APPETIZER = "APPETIZER"
    MAIN_COURSE = "MAIN_COURSE"
    DESSERT = "DESSERT"
    BEVERAGE = "BEVERAGE"
    SIDE_DISH = "SIDE_DISH"


@dataclass(frozen=True)
class MenuItem:
    id: str
    name: str
    description: str
    price: Decimal
    category: FoodCategory

    def __post_init__(self) -> None:
        try:
            price = self.price if isinstance(self.price, Decimal) else Decimal(str(self.price))
        except InvalidOperation:
            raise ValidationError(f"Invalid price for menu item {self.id}: {self.price!r}")
        if price < 0:
            raise ValidationError(f"Price of menu item {self.id} cannot be negative")
        object.__setattr__(self, "price", price)


@dataclass(frozen=True)
class Address:
    street: str
    city: str
    state: str
    postal_code: str
    country: str

    def __post_init__(self) -> None:
        for name in ("street", "city", "state", "postal_code", "country"):
            if getattr(self, name) is None:
                raise ValidationError(f"Address {name} cannot be None")


class Order:
    """
    A food delivery order. Construction validates the customer, restaurant and items and
    copies the items mapping; the caller's mapping is never mutated or retained.
    """

    def __init__(
        self,
        customer_id: str,
        restaurant_id: str,
        items: Mapping[MenuItem, int],
        delivery_address: Address,
        special_instructions: str = "",
    ) -> None:
        _validate(customer_id, restaurant_id, items)
        self.id = str(uuid.uuid4())
        self.customer_id = customer_id
        self.restaurant_id = restaurant_id
        self._items: dict[MenuItem, int] = dict(items)
        self.delivery_address = delivery_address
        self.special_instructions = special_instructions
        self._status: OrderStatus = PENDING
        self.created_at = datetime.now()
        self._updated_at = self.created_at

    @property
    def items(self) -> Mapping[MenuItem, int]:
        return MappingProxyType(self._items)

    @property
    def status(self) -> OrderStatus:
        return self._status

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def update_status(self, new_status: OrderStatus) -> bool:
        """
        Move to new_status if the transition is allowed. Returns False without touching
        any field if the order is final or the transition is not in the table.
        """
        if is_final(self._status):
            return False
        if not is_valid_transition(self._status, new_status):
            return False
        self._status = new_status
        self._updated_at = datetime.now()
        return True

    def calculate_total(self) -> Decimal:
        return sum((item.price * quantity for item, quantity in self._items.items()), Decimal("0"))

    def summary(self) -> str:
        items = ", ".join(f"{item.name} x{quantity}" for item, quantity in self._items.items())
        return "\n".join([
            f"Order {self.id}",
            f"Status: {display_name(self._status)}",
            f"Items: {items}",
            f"Total: {settings.currency_label} {self.calculate_total():.2f}",
        ])

    def __repr__(self) -> str:
        return f"Order(id={self.id}, customer_id={self.customer_id}, status={self._status.kind.value})"


def _validate(customer_id: str, restaurant_id: str, items: Mapping[MenuItem, int]) -> None:
    if not customer_id or not customer_id.strip():
        raise ValidationError("Customer ID cannot be blank")
    if not restaurant_id or not restaurant_id.strip():
        raise ValidationError("Restaurant ID cannot be blank")
    if not items:
        raise ValidationError("Order must contain at least one item")
    if any(quantity <= 0 for quantity in items.values()):
        raise ValidationError("Item quantity must be greater than zero")
