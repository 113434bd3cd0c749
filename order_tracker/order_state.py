"""
Order lifecycle state machine. Valid transitions enforce business rules.

Statuses compare on their kind for transition purposes: Cancelled("a") and Cancelled("b")
are the same variant, so a cancelled order can never be re-cancelled with another reason.
"""
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


class StatusKind(str, Enum):
    PENDING = "PENDING"
    PREPARING = "PREPARING"
    READY_FOR_DELIVERY = "READY_FOR_DELIVERY"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class OrderStatus:
    kind: StatusKind
    reason: str | None = None

    def __post_init__(self) -> None:
        if self.kind is StatusKind.CANCELLED and self.reason is None:
            raise ValueError("Cancelled status requires a reason")
        if self.kind is not StatusKind.CANCELLED and self.reason is not None:
            raise ValueError(f"{self.kind.value} status does not carry a reason")

    @classmethod
    def cancelled(cls, reason: str) -> "OrderStatus":
        return cls(StatusKind.CANCELLED, reason)


PENDING = OrderStatus(StatusKind.PENDING)
PREPARING = OrderStatus(StatusKind.PREPARING)
READY_FOR_DELIVERY = OrderStatus(StatusKind.READY_FOR_DELIVERY)
OUT_FOR_DELIVERY = OrderStatus(StatusKind.OUT_FOR_DELIVERY)
DELIVERED = OrderStatus(StatusKind.DELIVERED)

# Current kind -> allowed next kinds
VALID_TRANSITIONS: MappingProxyType = MappingProxyType({
    StatusKind.PENDING: frozenset({StatusKind.PREPARING, StatusKind.CANCELLED}),
    StatusKind.PREPARING: frozenset({StatusKind.READY_FOR_DELIVERY, StatusKind.CANCELLED}),
    StatusKind.READY_FOR_DELIVERY: frozenset({StatusKind.OUT_FOR_DELIVERY, StatusKind.CANCELLED}),
    StatusKind.OUT_FOR_DELIVERY: frozenset({StatusKind.DELIVERED, StatusKind.CANCELLED}),
    StatusKind.DELIVERED: frozenset(),  # terminal
    StatusKind.CANCELLED: frozenset(),  # terminal
})

_DISPLAY_NAMES = {
    StatusKind.PENDING: "Pending",
    StatusKind.PREPARING: "Preparing",
    StatusKind.READY_FOR_DELIVERY: "Ready for Delivery",
    StatusKind.OUT_FOR_DELIVERY: "Out for Delivery",
    StatusKind.DELIVERED: "Delivered",
}


def is_valid_transition(current: OrderStatus, new: OrderStatus) -> bool:
    """True if new's kind is allowed after current's kind."""
    if current.kind is new.kind:
        return False
    return new.kind in VALID_TRANSITIONS.get(current.kind, frozenset())


def is_final(status: OrderStatus) -> bool:
    return status.kind in (StatusKind.DELIVERED, StatusKind.CANCELLED)


def display_name(status: OrderStatus) -> str:
    if status.kind is StatusKind.CANCELLED:
        return f"Cancelled: {status.reason}"
    return _DISPLAY_NAMES[status.kind]
