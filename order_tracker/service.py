"""
In-memory order registry: owns every Order by id and is the only component that changes order status.
All reads and writes hold one RLock so create, update and cancel are each atomic.
Callers only ever receive copies of stored orders; changing a copy never reaches the registry.
"""
import copy
import logging
import threading
from typing import Callable, Mapping

from order_tracker.config import settings
from order_tracker.exceptions import OrderFinalizedError, OrderNotFoundError, OrderProcessingError
from order_tracker.metrics import (
    order_status_updates_total,
    order_transitions_rejected_total,
    orders_cancelled_total,
    orders_created_total,
    orders_in_progress,
)
from order_tracker.models import Address, MenuItem, Order
from order_tracker.order_state import OrderStatus, StatusKind, display_name, is_final

logger = logging.getLogger(__name__)

ESTIMATED_DELIVERY_MESSAGES: dict[StatusKind, str] = {
    StatusKind.PENDING: "Preparing your order...",
    StatusKind.PREPARING: "Estimated delivery in 30-45 minutes",
    StatusKind.READY_FOR_DELIVERY: "Your order is ready and will be delivered soon",
    StatusKind.OUT_FOR_DELIVERY: "Your order is on its way!",
    StatusKind.DELIVERED: "Order has been delivered",
    StatusKind.CANCELLED: "Order was cancelled",
}


class OrderService:
    def __init__(self) -> None:
        self._orders: dict[str, Order] = {}
        self._lock = threading.RLock()

    def create_order(
        self,
        customer_id: str,
        restaurant_id: str,
        items: Mapping[MenuItem, int],
        delivery_address: Address,
        special_instructions: str = "",
    ) -> Order:
        """Validate and store a new Pending order. Any failure is re-raised as OrderProcessingError."""
        try:
            order = Order(
                customer_id=customer_id,
                restaurant_id=restaurant_id,
                items=items,
                delivery_address=delivery_address,
                special_instructions=special_instructions,
            )
        except Exception as e:
            logger.warning("Failed to create order for customer_id=%s: %s", customer_id, e)
            raise OrderProcessingError(f"Failed to create order: {e}") from e

        with self._lock:
            self._orders[order.id] = order
            snapshot = copy.copy(order)
        orders_created_total.inc()
        orders_in_progress.inc()
        logger.info("Created order_id=%s customer_id=%s restaurant_id=%s", order.id, customer_id, restaurant_id)
        return snapshot

    def update_order_status(self, order_id: str, new_status: OrderStatus) -> bool:
        """
        Apply a status transition. Raises OrderNotFoundError for an unknown id; returns False
        if the order is final or the transition is not allowed.
        """
        with self._lock:
            order = self._get(order_id)
            current = order.status
            if is_final(current):
                logger.warning("Attempted to update status of finalized order_id=%s", order_id)
                self._record_rejection(current, new_status)
                return False
            if not order.update_status(new_status):
                logger.warning(
                    "Rejected transition for order_id=%s: %s -> %s",
                    order_id, current.kind.value, new_status.kind.value,
                )
                self._record_rejection(current, new_status)
                return False
        self._record_transition(new_status)
        logger.info("Updated order_id=%s status to %s", order_id, display_name(new_status))
        return True

    def cancel_order(self, order_id: str, reason: str | None = None) -> Order:
        """Cancel a non-final order. Raises OrderNotFoundError or OrderFinalizedError."""
        if reason is None:
            reason = settings.default_cancel_reason
        cancelled = OrderStatus.cancelled(reason)
        with self._lock:
            order = self._get(order_id)
            if is_final(order.status):
                raise OrderFinalizedError(order_id)
            # CANCELLED is an allowed target from every non-final kind
            order.update_status(cancelled)
            snapshot = copy.copy(order)
        orders_cancelled_total.inc()
        self._record_transition(cancelled)
        logger.info("Cancelled order_id=%s. Reason: %s", order_id, reason)
        return snapshot

    def get_order_by_id(self, order_id: str) -> Order:
        with self._lock:
            return copy.copy(self._get(order_id))

    def list_orders(self) -> list[Order]:
        return self._filter(lambda o: True)

    def get_customer_orders(self, customer_id: str) -> list[Order]:
        return self._filter(lambda o: o.customer_id == customer_id)

    def get_restaurant_orders(self, restaurant_id: str) -> list[Order]:
        return self._filter(lambda o: o.restaurant_id == restaurant_id)

    def get_in_progress_orders(self) -> list[Order]:
        return self._filter(lambda o: not is_final(o.status))

    def get_estimated_delivery_time(self, order_id: str) -> str:
        """Fixed message per status; no timing is computed."""
        order = self.get_order_by_id(order_id)
        return ESTIMATED_DELIVERY_MESSAGES[order.status.kind]

    def get_order_history(self, order_id: str) -> dict[str, str]:
        """
        Creation time plus the terminal event, if any. Intermediate transitions
        (Preparing, Ready for Delivery, Out for Delivery) are not recorded.
        """
        with self._lock:
            order = self._get(order_id)
            history = {"Ordered": order.created_at.isoformat()}
            if order.status.kind is StatusKind.DELIVERED:
                history["Delivered"] = order.updated_at.isoformat()
            elif order.status.kind is StatusKind.CANCELLED:
                history["Cancelled"] = order.updated_at.isoformat()
        return history

    def _get(self, order_id: str) -> Order:
        order = self._orders.get(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def _filter(self, predicate: Callable[[Order], bool]) -> list[Order]:
        with self._lock:
            return [copy.copy(o) for o in self._orders.values() if predicate(o)]

    @staticmethod
    def _record_transition(new_status: OrderStatus) -> None:
        order_status_updates_total.labels(status=new_status.kind.value).inc()
        if is_final(new_status):
            orders_in_progress.dec()

    @staticmethod
    def _record_rejection(current: OrderStatus, attempted: OrderStatus) -> None:
        order_transitions_rejected_total.labels(
            current_status=current.kind.value,
            attempted_status=attempted.kind.value,
        ).inc()
