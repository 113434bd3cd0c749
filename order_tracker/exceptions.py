"""
Order error taxonomy. A rejected status transition is not an error: the service reports it as False.
"""


class OrderError(Exception):
    """Base class for order-related errors."""


class ValidationError(OrderError):
    """Raised when an order or one of its values fails validation at construction."""


class OrderNotFoundError(OrderError):
    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order with ID {order_id} not found")


class OrderFinalizedError(OrderError):
    """Raised when cancelling an order that is already Delivered or Cancelled."""
    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order {order_id} is in a final state and cannot be modified")


class OrderProcessingError(OrderError):
    """Raised by the service when an order cannot be created. The cause is chained."""
